"""
mask_nodes.py

Node definitions for the extended object mask language.
Pure data structures, no parsing logic.

A mask such as ``mask[id,hostname,datacenter[name]]`` is one
``MaskNode`` holding three ``MaskProperty`` entries, the last of which
carries a one-entry sub-mask.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

MASK_KEYWORD = "mask"


def _collapse(properties: Iterable["MaskProperty"]) -> Tuple["MaskProperty", ...]:
    """
    Collapse properties sharing a name into one entry.

    The first occurrence keeps its position; later occurrences merge
    their sub-masks into it.
    """
    merged = {}
    for prop in properties:
        if prop.name in merged:
            merged[prop.name] = merged[prop.name].merge(prop)
        else:
            merged[prop.name] = prop
    return tuple(merged.values())


@dataclass(frozen=True)
class MaskProperty:
    """A property name with an optional sub-mask."""
    name: str
    children: Tuple["MaskProperty", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "children", _collapse(self.children))

    def merge(self, other: "MaskProperty") -> "MaskProperty":
        """Return a new property whose sub-mask is the union of both."""
        return MaskProperty(self.name, self.children + other.children)

    def to_mask_string(self) -> str:
        if not self.children:
            return self.name
        inner = ",".join(child.to_mask_string() for child in self.children)
        return f"{self.name}[{inner}]"

    def __str__(self) -> str:
        return self.to_mask_string()


@dataclass(frozen=True)
class MaskNode:
    """
    One top-level mask fragment.

    ``type_scope`` is None for a default ``mask[...]`` fragment and the
    type name for a ``mask(Type).prop`` fragment. Property names are
    unique within a node; duplicates given to the constructor are
    collapsed.
    """
    type_scope: Optional[str]
    properties: Tuple[MaskProperty, ...]

    def __post_init__(self):
        object.__setattr__(self, "properties", _collapse(self.properties))

    @property
    def property_names(self) -> Tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)

    def get(self, name: str) -> Optional[MaskProperty]:
        """Return the property called ``name``, or None."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def to_mask_string(self) -> str:
        """
        Render the canonical form of this fragment.

        Untyped fragments always use brackets. Typed fragments use the
        dotted form for a single property and brackets otherwise:

            mask[a,b[c]]
            mask(Type).a[c]
            mask(Type)[a,b]
        """
        if self.type_scope is None:
            inner = ",".join(prop.to_mask_string() for prop in self.properties)
            return f"{MASK_KEYWORD}[{inner}]"

        head = f"{MASK_KEYWORD}({self.type_scope})"
        if len(self.properties) == 1:
            return f"{head}.{self.properties[0].to_mask_string()}"
        inner = ",".join(prop.to_mask_string() for prop in self.properties)
        return f"{head}[{inner}]"

    def to_dict(self) -> dict:
        """Convert the node to a dict for debugging and serialization."""
        def prop_to_dict(prop: MaskProperty) -> dict:
            d = {"name": prop.name}
            if prop.children:
                d["children"] = [prop_to_dict(c) for c in prop.children]
            return d

        return {
            "type": self.type_scope,
            "properties": [prop_to_dict(p) for p in self.properties],
        }

    def __str__(self) -> str:
        return self.to_mask_string()
