"""
object_filter.py

Object filters narrow the results a remote call returns.

An ObjectFilter is an immutable tree of criteria keyed by property
path. ``virtualGuests.hostname`` with criteria ``{"operation": "*= web"}``
becomes::

    {"virtualGuests": {"hostname": {"operation": "*= web"}}}

Design Invariants:
- Immutable after creation
- Every update returns a new filter
- Values are JSON-serializable
- to_dict() always returns a copy
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from apifilter.errors import InvalidArgumentError, ParameterImmutabilityError


_KEY_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Operation prefixes understood by the remote filter language
FILTER_OPERATIONS = {
    "is_not_equal": "!=",
    "contains": "*=",
    "begins_with": "^=",
    "ends_with": "$=",
    "matches_ignoring_case": "_=",
    "is_greater_than": ">",
    "is_less_than": "<",
    "is_greater_or_equal": ">=",
    "is_less_or_equal": "<=",
}


@runtime_checkable
class FilterCapability(Protocol):
    """Anything that can be converted to a plain filter structure."""

    def to_dict(self) -> Dict[str, Any]:
        ...


def is_filter_capability(value: Any) -> bool:
    """
    True if the class of ``value`` defines a callable to_dict().

    Looked up on the type so objects that invent attributes on demand
    (mocks, API filters forwarding unknown names) do not qualify.
    """
    return value is not None and callable(getattr(type(value), "to_dict", None))


# =============================================================================
# Helper Functions
# =============================================================================

def _split_key_path(key_path: Any) -> List[str]:
    """
    Split a dotted key path into validated segments.

    Raises:
        InvalidArgumentError: If the path is not a dotted identifier path
    """
    if not isinstance(key_path, str) or not key_path.strip():
        raise InvalidArgumentError(
            "object_filter",
            f"expects a non-empty key path, got {key_path!r}",
            error_code="E210",
        )
    segments = key_path.split(".")
    for segment in segments:
        if not _KEY_SEGMENT.match(segment):
            raise InvalidArgumentError(
                "object_filter",
                f"key path {key_path!r} has an invalid segment {segment!r}",
                error_code="E210",
            )
    return segments


def _copy_tree(value: Any, what: str = "criteria") -> Any:
    """Deep copy via JSON roundtrip so no caller reference leaks in or out."""
    try:
        return json.loads(json.dumps(value, sort_keys=True))
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            "object_filter",
            f"{what} must be JSON-serializable: {e}",
            error_code="E211",
        ) from e


def _is_criteria(node: Any) -> bool:
    return isinstance(node, dict) and "operation" in node


# =============================================================================
# Operation Helpers
# =============================================================================

def _prefixed(operation: str, value: Any) -> Dict[str, Any]:
    return {"operation": f"{FILTER_OPERATIONS[operation]} {value}"}


def is_equal(value: Any) -> Dict[str, Any]:
    """Exact match; numbers are sent unchanged."""
    return {"operation": value}


def is_not_equal(value: Any) -> Dict[str, Any]:
    return _prefixed("is_not_equal", value)


def contains(value: Any) -> Dict[str, Any]:
    return _prefixed("contains", value)


def begins_with(value: Any) -> Dict[str, Any]:
    return _prefixed("begins_with", value)


def ends_with(value: Any) -> Dict[str, Any]:
    return _prefixed("ends_with", value)


def matches_ignoring_case(value: Any) -> Dict[str, Any]:
    return _prefixed("matches_ignoring_case", value)


def is_greater_than(value: Any) -> Dict[str, Any]:
    return _prefixed("is_greater_than", value)


def is_less_than(value: Any) -> Dict[str, Any]:
    return _prefixed("is_less_than", value)


def is_greater_or_equal(value: Any) -> Dict[str, Any]:
    return _prefixed("is_greater_or_equal", value)


def is_less_or_equal(value: Any) -> Dict[str, Any]:
    return _prefixed("is_less_or_equal", value)


def is_null() -> Dict[str, Any]:
    return {"operation": "is null"}


def is_not_null() -> Dict[str, Any]:
    return {"operation": "not null"}


def in_set(values: Iterable[Any]) -> Dict[str, Any]:
    """Match any of ``values``."""
    return {
        "operation": "in",
        "options": [{"name": "data", "value": list(values)}],
    }


# =============================================================================
# ObjectFilter
# =============================================================================

class ObjectFilter:
    """
    Immutable tree of filter criteria keyed by property path.

    Example:
        f = (
            ObjectFilter()
            .set_criteria("virtualGuests.hostname", contains("web"))
            .set_criteria("virtualGuests.maxMemory", is_greater_than(2048))
        )
        f.to_dict()
        # {"virtualGuests": {"hostname": {"operation": "*= web"},
        #                    "maxMemory": {"operation": "> 2048"}}}
    """

    __slots__ = ("_tree", "_frozen")

    def __init__(self, tree: Optional[Dict[str, Any]] = None):
        object.__setattr__(self, "_frozen", False)

        if tree is not None and not isinstance(tree, dict):
            raise InvalidArgumentError(
                "object_filter",
                f"expects a dict or None, got {type(tree).__name__}",
                error_code="E212",
            )

        self._tree = _copy_tree(tree or {}, "filter tree")
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise ParameterImmutabilityError("ObjectFilter", f"set attribute '{name}'")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        raise ParameterImmutabilityError("ObjectFilter", f"delete attribute '{name}'")

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectFilter":
        return cls(tree=data)

    # =========================================================================
    # Core Operations
    # =========================================================================

    def set_criteria(self, key_path: str, criteria: Dict[str, Any]) -> "ObjectFilter":
        """
        Return a NEW filter with ``criteria`` stored at ``key_path``.

        Any criteria already at that path are replaced.

        Raises:
            InvalidArgumentError: If the path or criteria are invalid, or
                the path passes through an existing criteria entry
        """
        segments = _split_key_path(key_path)
        if not isinstance(criteria, dict) or not criteria:
            raise InvalidArgumentError(
                "object_filter",
                f"criteria for {key_path!r} must be a non-empty dict",
                error_code="E211",
            )

        tree = _copy_tree(self._tree)
        node = tree
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict) or _is_criteria(child):
                raise InvalidArgumentError(
                    "object_filter",
                    f"key path {key_path!r} passes through criteria at {segment!r}",
                    error_code="E213",
                )
            node = child
        node[segments[-1]] = _copy_tree(criteria)

        return ObjectFilter(tree)

    def criteria_for(self, key_path: str) -> Optional[Dict[str, Any]]:
        """Return a copy of the criteria at ``key_path``, or None."""
        node: Any = self._tree
        for segment in _split_key_path(key_path):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        if not _is_criteria(node):
            return None
        return _copy_tree(node)

    def has_criteria(self, key_path: str) -> bool:
        return self.criteria_for(key_path) is not None

    @property
    def is_empty(self) -> bool:
        return not self._tree

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dict, safe for the caller to modify."""
        return _copy_tree(self._tree)

    def to_json(self) -> str:
        return json.dumps(self._tree, sort_keys=True)

    # =========================================================================
    # Equality and Hashing
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectFilter):
            return NotImplemented
        return self.to_json() == other.to_json()

    def __hash__(self) -> int:
        return hash(self.to_json())

    def __repr__(self) -> str:
        return f"ObjectFilter({self.to_json()})"
