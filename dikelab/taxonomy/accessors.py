"""Read accessors over a factor taxonomy.

Each of the eight checklist factors lives at a fixed address in the tree:
either ``category/subcategory`` (leaves are the subcategory's children) or
``category`` alone (leaves are the category's children). A missing
category or subcategory yields an empty value list rather than an error.
"""

from __future__ import annotations

import json
import math

from pydantic import ValidationError

from dikelab.models.common import FactorField
from dikelab.models.taxonomy import TaxonomyNode, TaxonomySummary

# Factor -> (category id, subcategory id or None), in generation order.
FACTOR_ADDRESSES: dict[FactorField, tuple[str, str | None]] = {
    FactorField.HEIGHT: ("dike-size", "height"),
    FactorField.WIDTH: ("dike-size", "width"),
    FactorField.SLOPE_RATIO: ("dike-size", "slope-ratio"),
    FactorField.PGA: ("earthquake", "pga"),
    FactorField.H1H2_RATIO: ("thickness-ratio", "h1h2"),
    FactorField.GROUNDWATER: ("thickness-ratio", "groundwater"),
    FactorField.RELATIVE_DENSITY: ("relative-density", None),
    FactorField.INCLINATION: ("inclination", None),
}


def leaf_values(
    taxonomy: TaxonomyNode,
    category_id: str,
    subcategory_id: str | None = None,
) -> list[str]:
    """Names of the leaves at ``category_id[/subcategory_id]``; [] if absent."""
    category = taxonomy.find_child(category_id)
    if category is None:
        return []
    if subcategory_id is None:
        return category.child_names()
    subcategory = category.find_child(subcategory_id)
    if subcategory is None:
        return []
    return subcategory.child_names()


def factor_values(taxonomy: TaxonomyNode) -> dict[FactorField, list[str]]:
    """Leaf value sequences for all eight factors, in generation order."""
    return {
        factor: leaf_values(taxonomy, category_id, subcategory_id)
        for factor, (category_id, subcategory_id) in FACTOR_ADDRESSES.items()
    }


def summarize(taxonomy: TaxonomyNode) -> TaxonomySummary:
    """Flatten the taxonomy into per-level name lists and the product size."""
    subcategories: dict[str, list[str]] = {}
    values: dict[str, list[str]] = {}
    for category in taxonomy.children:
        if not category.children:
            continue
        subcategories[category.name] = category.child_names()
        for sub in category.children:
            if sub.children:
                values[sub.name] = sub.child_names()

    counts = [len(v) for v in factor_values(taxonomy).values()]
    return TaxonomySummary(
        categories=taxonomy.child_names(),
        subcategories=subcategories,
        values=values,
        total_combinations=math.prod(counts),
    )


def parse_taxonomy(payload: str | bytes | dict) -> TaxonomyNode:
    """Validate a whole-tree replacement.

    Accepts a JSON document or an already decoded mapping.

    Raises:
        ValueError: If the payload is not a valid tree or node ids repeat.
    """
    try:
        if isinstance(payload, dict):
            tree = TaxonomyNode.model_validate(payload)
        else:
            tree = TaxonomyNode.model_validate(json.loads(payload))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        msg = f"Invalid taxonomy document: {exc}"
        raise ValueError(msg) from exc

    dupes = tree.duplicate_ids()
    if dupes:
        msg = f"Taxonomy node ids must be unique; repeated: {', '.join(dupes)}"
        raise ValueError(msg)
    return tree
