"""
mask_reducer.py

Merges object mask fragments into a minimal set and renders the result.

The remote API rejects a mask that asks for the same property twice
within one type scope. Reduction folds every fragment with a matching
scope into the first one seen, unioning properties by name and merging
sub-masks recursively, so the mask that goes over the wire never
repeats a property.

Nodes are frozen: merging always builds new nodes and never touches a
sequence held elsewhere.
"""

import logging
from typing import Iterable, List, Optional

from apifilter.mask_nodes import MaskNode

logger = logging.getLogger(__name__)


def can_merge(existing: MaskNode, incoming: MaskNode) -> bool:
    """Two fragments merge when they share a type scope (or both have none)."""
    return existing.type_scope == incoming.type_scope


def merge_nodes(existing: MaskNode, incoming: MaskNode) -> MaskNode:
    """
    Return a new node holding the properties of both fragments.

    Properties of ``existing`` keep their order; properties only in
    ``incoming`` are appended. Shared names merge their sub-masks.
    """
    if not can_merge(existing, incoming):
        raise ValueError(
            f"cannot merge mask scoped to {incoming.type_scope!r} "
            f"into mask scoped to {existing.type_scope!r}"
        )
    # MaskNode collapses repeated names on construction
    return MaskNode(existing.type_scope, existing.properties + incoming.properties)


def reduce_masks(nodes: Iterable[MaskNode]) -> List[MaskNode]:
    """
    Reduce fragments to one node per type scope.

    Single stable left-to-right pass: each fragment merges into the
    first already-placed fragment with the same scope, or is appended.
    Reducing an already reduced list returns an equal list.
    """
    reduced: List[MaskNode] = []
    count = 0

    for node in nodes:
        count += 1
        for index, placed in enumerate(reduced):
            if can_merge(placed, node):
                reduced[index] = merge_nodes(placed, node)
                break
        else:
            reduced.append(node)

    if count != len(reduced):
        logger.debug("Reduced %d mask fragments to %d", count, len(reduced))

    return reduced


def render_masks(nodes: Iterable[MaskNode]) -> Optional[str]:
    """
    Reduce and render fragments to the canonical mask string.

    One fragment renders on its own, several render as a bracketed
    comma-joined list, none renders as None.
    """
    reduced = reduce_masks(nodes)
    if not reduced:
        return None
    if len(reduced) == 1:
        return reduced[0].to_mask_string()
    return "[" + ",".join(node.to_mask_string() for node in reduced) + "]"
