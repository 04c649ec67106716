"""
apifilter — Scoping parameters for remote-object API calls
==========================================================

apifilter lets an API client compose, through a chain of calls, the
scoping information that accompanies a remote method call: the target
object id, an extended object mask, a result window and an object
filter. The accumulated parameters are handed to a Remote Service
together with the method name and arguments.

What's Public
-------------
Everything exported in ``__all__`` is public:

- **Chain**: APIParameterFilter, RemoteService
- **Parameters**: ParameterSet
- **Object masks**: MaskNode, MaskProperty, parse_mask, reduce_masks, render_masks
- **Object filters**: ObjectFilter, FilterCapability and the operation helpers
- **Exceptions**: the ParameterFilterError hierarchy

Example
-------
::

    from apifilter import APIParameterFilter, ObjectFilter, contains

    tickets = APIParameterFilter(ticket_service)
    result = (
        tickets
        .object_mask("mask[id,title]", "mask(SoftLayer_Ticket).status")
        .object_filter(ObjectFilter().set_criteria("title", contains("disk")))
        .result_limit(0, 25)
        .invoke("getObject")
    )

Logging
-------
Modules log through ``logging.getLogger(__name__)`` under the
``apifilter`` logger. No handlers are installed.
"""

__version__ = "1.0.0"

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Chain ---
    "APIParameterFilter",
    "RemoteService",

    # --- Parameters ---
    "ParameterSet",
    "WIRE_KEYS",

    # --- Object Masks ---
    "MaskNode",
    "MaskProperty",
    "parse_mask",
    "can_merge",
    "merge_nodes",
    "reduce_masks",
    "render_masks",

    # --- Object Filters ---
    "ObjectFilter",
    "FilterCapability",
    "is_filter_capability",
    "FILTER_OPERATIONS",
    "is_equal",
    "is_not_equal",
    "contains",
    "begins_with",
    "ends_with",
    "matches_ignoring_case",
    "is_greater_than",
    "is_less_than",
    "is_greater_or_equal",
    "is_less_or_equal",
    "is_null",
    "is_not_null",
    "in_set",

    # --- Exceptions ---
    "ParameterFilterError",
    "MalformedMaskError",
    "EmptyMaskError",
    "UnbalancedMaskError",
    "MissingNameError",
    "UnexpectedMaskTokenError",
    "InvalidArgumentError",
    "UnhandledCallError",
    "ParameterImmutabilityError",
    "format_error_for_user",
]

from apifilter.chain import APIParameterFilter, RemoteService
from apifilter.errors import (
    EmptyMaskError,
    InvalidArgumentError,
    MalformedMaskError,
    MissingNameError,
    ParameterFilterError,
    ParameterImmutabilityError,
    UnbalancedMaskError,
    UnexpectedMaskTokenError,
    UnhandledCallError,
    format_error_for_user,
)
from apifilter.mask_nodes import MaskNode, MaskProperty
from apifilter.mask_parser import parse_mask
from apifilter.mask_reducer import can_merge, merge_nodes, reduce_masks, render_masks
from apifilter.object_filter import (
    FILTER_OPERATIONS,
    FilterCapability,
    ObjectFilter,
    begins_with,
    contains,
    ends_with,
    in_set,
    is_equal,
    is_filter_capability,
    is_greater_or_equal,
    is_greater_than,
    is_less_or_equal,
    is_less_than,
    is_not_equal,
    is_not_null,
    is_null,
    matches_ignoring_case,
)
from apifilter.parameters import WIRE_KEYS, ParameterSet
