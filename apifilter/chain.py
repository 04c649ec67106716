"""
chain.py

APIParameterFilter — chainable scoping for remote API calls.

A filter wraps a Remote Service (its target) and a ParameterSet. The
scoping methods return a new filter with a new ParameterSet and the
same target; any other call is forwarded to the target together with
the filter, whose ``server_*`` properties render the accumulated
parameters for the request:

    ticket_service.object_with_id(12345).object_mask("mask[id]").invoke("getObject")

Attribute access is sugar for ``invoke``, so the call above can also be
written ``...object_mask("mask[id]").getObject()``.

Design Invariants:
- A filter never changes after construction
- Scoping methods never touch the filter they are called on
- Each forwarded call reaches the target exactly once
- Errors raised by the target propagate unchanged
"""

import functools
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Protocol

from apifilter.errors import ParameterImmutabilityError, UnhandledCallError
from apifilter.object_filter import FilterCapability
from apifilter.parameters import ParameterSet

logger = logging.getLogger(__name__)

_FORWARDABLE_NAME = re.compile(r"[^\W_]")


class RemoteService(Protocol):
    """The collaborator that performs the actual remote call."""

    service_name: str

    def call_api_with_params(
        self,
        method_name: str,
        parameters: "APIParameterFilter",
        args: List[Any],
    ) -> Any:
        ...


class APIParameterFilter:
    """
    Immutable chain link carrying scoping parameters to a Remote Service.

    Instances are usually created by the service itself when a scoping
    method is called on it; there is rarely a reason to build one by hand.
    """

    __slots__ = ('_target', '_parameters')

    def __init__(self, target: RemoteService, parameters: Optional[ParameterSet] = None):
        object.__setattr__(self, '_target', target)
        object.__setattr__(self, '_parameters', parameters if parameters is not None else ParameterSet.empty())

    def __setattr__(self, name: str, value: Any) -> None:
        raise ParameterImmutabilityError("APIParameterFilter", f"set attribute '{name}'")

    def __delattr__(self, name: str) -> None:
        raise ParameterImmutabilityError("APIParameterFilter", f"delete attribute '{name}'")

    @property
    def target(self) -> RemoteService:
        return self._target

    @property
    def parameters(self) -> ParameterSet:
        return self._parameters

    @property
    def service_name(self) -> str:
        """The service the eventual call goes to, as named by the target."""
        return self._target.service_name

    def _with(self, parameters: ParameterSet) -> "APIParameterFilter":
        return APIParameterFilter(self._target, parameters)

    # =========================================================================
    # Scoping
    # =========================================================================

    def object_with_id(self, object_id: Any) -> "APIParameterFilter":
        """
        Narrow the call to the remote object with ``object_id``.

            ticket_service.object_with_id(12345).getObject()
        """
        return self._with(self._parameters.with_object_id(object_id))

    def object_mask(self, *masks: str) -> "APIParameterFilter":
        """
        Add extended object masks to the call.

            ticket_service.object_mask(
                "mask[createDate, modifyDate]",
                "mask(SoftLayer_Some_Type).aProperty",
            ).getObject()

        Masks from every object_mask call in the chain are merged into a
        minimal mask when the request is built.
        """
        return self._with(self._parameters.with_masks(*masks))

    def result_limit(self, offset: int, limit: int) -> "APIParameterFilter":
        """
        Page through long result lists.

        ``offset`` is the index of the first item returned and ``limit``
        the number of items:

            account_service.result_limit(10, 5).getOpenTickets()
        """
        return self._with(self._parameters.with_result_window(offset, limit))

    def object_filter(self, object_filter: FilterCapability) -> "APIParameterFilter":
        """Filter the results on the server, replacing any earlier filter."""
        return self._with(self._parameters.with_object_filter(object_filter))

    # =========================================================================
    # Rendered Parameters
    # =========================================================================

    @property
    def server_object_id(self) -> Any:
        return self._parameters.rendered_object_id()

    @property
    def server_object_mask(self) -> Optional[str]:
        """The reduced object mask, or None when no mask was given."""
        return self._parameters.rendered_object_mask()

    @property
    def server_result_limit(self) -> Optional[int]:
        return self._parameters.rendered_result_limit()

    @property
    def server_result_offset(self) -> Optional[int]:
        return self._parameters.rendered_result_offset()

    @property
    def server_object_filter(self) -> Optional[Dict[str, Any]]:
        return self._parameters.rendered_object_filter()

    # =========================================================================
    # Forwarding
    # =========================================================================

    def invoke(self, method_name: str, *args: Any, block: Optional[Callable] = None) -> Any:
        """
        Call ``method_name`` on the target with the accumulated parameters.

        Raises:
            UnhandledCallError: If a block is passed or the name has no
                alphanumeric character
        """
        if block is not None:
            raise UnhandledCallError(method_name, "blocks are not forwarded")
        if not isinstance(method_name, str) or not _FORWARDABLE_NAME.search(method_name):
            raise UnhandledCallError(method_name, "not a remote method name")

        logger.debug(
            "Forwarding %s with args=%r params=%r", method_name, args, self._parameters
        )
        return self._target.call_api_with_params(method_name, self, list(args))

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Also reached when a property raises AttributeError; evaluating it
        # again lets that error surface instead of forwarding the name.
        if hasattr(type(self), name):
            return object.__getattribute__(self, name)
        if name.startswith("_"):
            raise UnhandledCallError(name, "private names are not forwarded")
        return functools.partial(self.invoke, name)

    def __repr__(self) -> str:
        return f"APIParameterFilter(target={self._target!r}, parameters={self._parameters!r})"
