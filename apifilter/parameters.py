"""
parameters.py

ParameterSet — the scoping values accumulated for one remote call.

A ParameterSet holds the target object id, the object mask fragments,
the result window and the object filter. It is never changed after
construction: every ``with_*`` operation returns a new set built from
this one plus an override, so a chain handed out earlier and reused
later never sees changes made further down another chain.

Design Invariants:
- Immutable after creation
- Arguments validated before anything new is built
- Mask fragments kept unreduced, in insertion order, until rendered
- result_offset and result_limit are set together or not at all
"""

from typing import Any, Dict, Optional, Tuple

from apifilter.errors import InvalidArgumentError, ParameterImmutabilityError
from apifilter.mask_nodes import MaskNode
from apifilter.mask_parser import parse_mask
from apifilter.mask_reducer import render_masks
from apifilter.object_filter import FilterCapability, is_filter_capability

# Key each rendered value is sent under
WIRE_KEYS = {
    "object_id": "objectId",
    "object_mask": "objectMask",
    "result_limit": "resultLimit",
    "result_offset": "resultOffset",
    "object_filter": "objectFilter",
}


def _validate_window_value(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            "result_limit",
            f"expects an integer {name}, got {type(value).__name__}",
            error_code="E203",
        )
    if value < 0:
        raise InvalidArgumentError(
            "result_limit",
            f"expects a non-negative {name}, got {value}",
            error_code="E203",
        )
    return value


class ParameterSet:
    """
    Immutable bag of scoping parameters for a remote call.

    Example:
        params = (
            ParameterSet.empty()
            .with_object_id(12345)
            .with_masks("mask[id,createDate]")
            .with_masks("mask[id,modifyDate]")
        )
        params.rendered_object_mask()  # "mask[id,createDate,modifyDate]"
    """

    __slots__ = (
        '_object_id', '_object_mask', '_result_offset',
        '_result_limit', '_object_filter', '_frozen',
    )

    def __init__(
        self,
        *,
        object_id: Any = None,
        object_mask: Tuple[MaskNode, ...] = (),
        result_offset: Optional[int] = None,
        result_limit: Optional[int] = None,
        object_filter: Optional[FilterCapability] = None,
    ):
        if (result_offset is None) != (result_limit is None):
            raise InvalidArgumentError(
                "ParameterSet",
                "requires result_offset and result_limit together",
                error_code="E203",
            )

        object.__setattr__(self, '_object_id', object_id)
        object.__setattr__(self, '_object_mask', tuple(object_mask))
        object.__setattr__(self, '_result_offset', result_offset)
        object.__setattr__(self, '_result_limit', result_limit)
        object.__setattr__(self, '_object_filter', object_filter)
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, '_frozen', False):
            raise ParameterImmutabilityError("ParameterSet", f"set attribute '{name}'")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        raise ParameterImmutabilityError("ParameterSet", f"delete attribute '{name}'")

    @classmethod
    def empty(cls) -> "ParameterSet":
        return cls()

    def _replace(self, **overrides: Any) -> "ParameterSet":
        """Copy this set with some fields overridden."""
        fields = {
            "object_id": self._object_id,
            "object_mask": self._object_mask,
            "result_offset": self._result_offset,
            "result_limit": self._result_limit,
            "object_filter": self._object_filter,
        }
        fields.update(overrides)
        return ParameterSet(**fields)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def object_id(self) -> Any:
        return self._object_id

    @property
    def object_mask(self) -> Tuple[MaskNode, ...]:
        """Unreduced mask fragments in the order they were added."""
        return self._object_mask

    @property
    def result_offset(self) -> Optional[int]:
        return self._result_offset

    @property
    def result_limit(self) -> Optional[int]:
        return self._result_limit

    @property
    def object_filter(self) -> Optional[FilterCapability]:
        return self._object_filter

    # =========================================================================
    # Functional Updates
    # =========================================================================

    def with_object_id(self, object_id: Any) -> "ParameterSet":
        """
        Return a NEW set scoped to the remote object ``object_id``.

        Raises:
            InvalidArgumentError: If object_id is None or not an int/str
        """
        if object_id is None:
            raise InvalidArgumentError(
                "object_with_id", "expects an object id, got None", error_code="E201"
            )
        if isinstance(object_id, bool) or not isinstance(object_id, (int, str)):
            raise InvalidArgumentError(
                "object_with_id",
                f"expects an int or str id, got {type(object_id).__name__}",
                error_code="E201",
            )
        return self._replace(object_id=object_id)

    def with_masks(self, *mask_strings: str) -> "ParameterSet":
        """
        Return a NEW set with the parsed masks appended.

        Every string is parsed before anything is built, so a malformed
        mask leaves no partial result. Fragments are appended unreduced;
        reduction happens in rendered_object_mask().

        Raises:
            InvalidArgumentError: If no masks are given or one is not a
                non-empty string
            MalformedMaskError: If a mask string does not parse
        """
        if not mask_strings:
            raise InvalidArgumentError(
                "object_mask", "expects object mask strings", error_code="E202"
            )
        for mask in mask_strings:
            if not isinstance(mask, str):
                raise InvalidArgumentError(
                    "object_mask",
                    f"expects strings, got {type(mask).__name__}",
                    error_code="E202",
                )
            if not mask.strip():
                raise InvalidArgumentError(
                    "object_mask", "expects non-empty mask strings", error_code="E202"
                )

        parsed = []
        for mask in mask_strings:
            parsed.extend(parse_mask(mask))

        return self._replace(object_mask=self._object_mask + tuple(parsed))

    def with_result_window(self, offset: int, limit: int) -> "ParameterSet":
        """
        Return a NEW set paging results from ``offset``, ``limit`` at a time.

        Only non-negativity is checked here; the remote side enforces
        its own maximum.
        """
        offset = _validate_window_value("offset", offset)
        limit = _validate_window_value("limit", limit)
        return self._replace(result_offset=offset, result_limit=limit)

    def with_object_filter(self, object_filter: FilterCapability) -> "ParameterSet":
        """
        Return a NEW set using ``object_filter``, replacing any previous one.

        Raises:
            InvalidArgumentError: If the filter is None or its class defines
                no to_dict()
        """
        if not is_filter_capability(object_filter):
            raise InvalidArgumentError(
                "object_filter",
                f"expects an ObjectFilter, got {type(object_filter).__name__}",
                error_code="E204",
            )
        return self._replace(object_filter=object_filter)

    # =========================================================================
    # Rendered Values
    # =========================================================================

    def rendered_object_id(self) -> Any:
        return self._object_id

    def rendered_object_mask(self) -> Optional[str]:
        """Reduced canonical mask string, or None if no mask was added."""
        if not self._object_mask:
            return None
        return render_masks(self._object_mask)

    def rendered_result_limit(self) -> Optional[int]:
        return self._result_limit

    def rendered_result_offset(self) -> Optional[int]:
        return self._result_offset

    def rendered_object_filter(self) -> Optional[Dict[str, Any]]:
        if self._object_filter is None:
            return None
        return self._object_filter.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """
        Rendered values keyed by wire name.

        Only values that are set appear.
        """
        rendered = {
            "object_id": self.rendered_object_id(),
            "object_mask": self.rendered_object_mask(),
            "result_limit": self.rendered_result_limit(),
            "result_offset": self.rendered_result_offset(),
            "object_filter": self.rendered_object_filter(),
        }
        return {
            WIRE_KEYS[name]: value
            for name, value in rendered.items()
            if value is not None
        }

    # =========================================================================
    # Equality and Representation
    # =========================================================================

    def _key(self) -> Tuple[Any, ...]:
        return (
            self._object_id,
            self._object_mask,
            self._result_offset,
            self._result_limit,
            self._object_filter,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key()[:4])

    def __repr__(self) -> str:
        parts = []
        if self._object_id is not None:
            parts.append(f"object_id={self._object_id!r}")
        if self._object_mask:
            parts.append(f"masks={len(self._object_mask)}")
        if self._result_limit is not None:
            parts.append(f"offset={self._result_offset}, limit={self._result_limit}")
        if self._object_filter is not None:
            parts.append(f"object_filter={self._object_filter!r}")
        return f"ParameterSet({', '.join(parts)})"
