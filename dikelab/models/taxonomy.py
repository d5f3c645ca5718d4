"""Factor taxonomy tree models.

A taxonomy is a tree of categories, optional subcategories, and value
leaves. Leaf names are the value tokens copied verbatim into checklist
rows ("5m", "0.1g", "1:1.2", "Dr=30%", "1 degree").
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import Field

from dikelab.models.common import DikeLabBase


class TaxonomyNode(DikeLabBase):
    """One node of the factor taxonomy."""

    id: str = Field(..., min_length=1)
    name: str
    color: str | None = None
    children: list[TaxonomyNode] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        """A value leaf has no children."""
        return not self.children

    @property
    def is_value_group(self) -> bool:
        """A value group has children and all of them are leaves."""
        return bool(self.children) and all(c.is_leaf for c in self.children)

    def find_child(self, node_id: str) -> TaxonomyNode | None:
        """Return the direct child with ``node_id``, or None."""
        for child in self.children:
            if child.id == node_id:
                return child
        return None

    def child_names(self) -> list[str]:
        return [c.name for c in self.children]

    def iter_nodes(self) -> Iterator[TaxonomyNode]:
        """Depth-first pre-order traversal including this node."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def duplicate_ids(self) -> list[str]:
        """Return ids that occur more than once in the tree, in first-seen order."""
        seen: set[str] = set()
        dupes: list[str] = []
        for node in self.iter_nodes():
            if node.id in seen and node.id not in dupes:
                dupes.append(node.id)
            seen.add(node.id)
        return dupes


class TaxonomySummary(DikeLabBase):
    """Flattened view of a taxonomy: names per level and product size."""

    categories: list[str] = Field(default_factory=list)
    subcategories: dict[str, list[str]] = Field(default_factory=dict)
    values: dict[str, list[str]] = Field(default_factory=dict)
    total_combinations: int = Field(default=0, alias="totalCombinations")


class DetectionResult(DikeLabBase):
    """Output of structure detection from a taxonomy image."""

    structure: TaxonomyNode
    summary: TaxonomySummary
    stages: list[str] = Field(default_factory=list)
