"""Checklist combination generator.

Builds the full Cartesian product of the eight factor leaf sequences of a
taxonomy. Iteration order is fixed (height outermost, inclination
innermost) so the same taxonomy always yields the same ids in the same
order. Deterministic, pure functions.
"""

from __future__ import annotations

import itertools
import logging
import math

from dikelab.models.checklist import ChecklistItem
from dikelab.models.common import FACTOR_FIELDS
from dikelab.models.taxonomy import TaxonomyNode
from dikelab.taxonomy.accessors import factor_values

logger = logging.getLogger(__name__)

ITEM_ID_PREFIX = "item-"


def count_combinations(taxonomy: TaxonomyNode) -> int:
    """Product of the eight leaf counts, without materializing rows.

    Any missing factor contributes a zero and the product is zero.
    """
    return math.prod(len(v) for v in factor_values(taxonomy).values())


def generate_checklist(taxonomy: TaxonomyNode) -> list[ChecklistItem]:
    """Generate one ChecklistItem per factor combination.

    Ids are ``item-0`` .. ``item-(n-1)`` in product order. All tracking
    fields are at their defaults. A mismatch between the generated count
    and ``count_combinations`` is logged, never raised.
    """
    sequences = list(factor_values(taxonomy).values())
    items = [
        ChecklistItem.model_validate(
            {"id": f"{ITEM_ID_PREFIX}{index}", **dict(zip(FACTOR_FIELDS, combo))},
        )
        for index, combo in enumerate(itertools.product(*sequences))
    ]

    expected = count_combinations(taxonomy)
    logger.info("Generated %d combinations, expected %d", len(items), expected)
    if len(items) != expected:
        logger.warning(
            "Generated combination count %d does not match expected total %d",
            len(items),
            expected,
        )
    return items
