"""Built-in dike settlement factor taxonomy.

Five categories: dike size (height, width, slope ratio), earthquake (PGA),
thickness ratio (H1/(H1+H2), groundwater table), relative density, and
stratum inclination. Three values each, so 3^8 = 6561 combinations.
"""

from dikelab.models.taxonomy import TaxonomyNode

ROOT_ID = "root"
ROOT_NAME = "Dike settlement factors table"


def _leaves(pairs: list[tuple[str, str]]) -> list[TaxonomyNode]:
    return [TaxonomyNode(id=node_id, name=name) for node_id, name in pairs]


def default_taxonomy() -> TaxonomyNode:
    """Return a fresh copy of the built-in taxonomy."""
    return TaxonomyNode(
        id=ROOT_ID,
        name=ROOT_NAME,
        children=[
            TaxonomyNode(
                id="dike-size",
                name="Dike size",
                color="#f87171",
                children=[
                    TaxonomyNode(
                        id="height",
                        name="Height",
                        children=_leaves([
                            ("height-5m", "5m"),
                            ("height-7.5m", "7.5m"),
                            ("height-10m", "10m"),
                        ]),
                    ),
                    TaxonomyNode(
                        id="width",
                        name="Width",
                        children=_leaves([
                            ("width-20m", "20m"),
                            ("width-25m", "25m"),
                            ("width-30m", "30m"),
                        ]),
                    ),
                    TaxonomyNode(
                        id="slope-ratio",
                        name="Slope ratio(V:H)",
                        children=_leaves([
                            ("ratio-1:1.2", "1:1.2"),
                            ("ratio-1:1.5", "1:1.5"),
                            ("ratio-1:1.8", "1:1.8"),
                        ]),
                    ),
                ],
            ),
            TaxonomyNode(
                id="earthquake",
                name="Earthquake",
                color="#facc15",
                children=[
                    TaxonomyNode(
                        id="pga",
                        name="PGA",
                        children=_leaves([
                            ("pga-0.1g", "0.1g"),
                            ("pga-0.2g", "0.2g"),
                            ("pga-0.3g", "0.3g"),
                        ]),
                    ),
                ],
            ),
            TaxonomyNode(
                id="thickness-ratio",
                name="Liquifiable and nonliquifiable thickness ratio",
                color="#4ade80",
                children=[
                    TaxonomyNode(
                        id="h1h2",
                        name="H1/(H1+H2)",
                        children=_leaves([
                            ("h1h2-0.6", "0.6"),
                            ("h1h2-0.4", "0.4"),
                            ("h1h2-0.2", "0.2"),
                        ]),
                    ),
                    TaxonomyNode(
                        id="groundwater",
                        name="Groundwater table",
                        children=_leaves([
                            ("gw-1m", "-1m"),
                            ("gw-3m", "-3m"),
                            ("gw-5m", "-5m"),
                        ]),
                    ),
                ],
            ),
            TaxonomyNode(
                id="relative-density",
                name="Relative density",
                color="#3b82f6",
                children=_leaves([
                    ("density-30", "Dr=30%"),
                    ("density-50", "Dr=50%"),
                    ("density-70", "Dr=70%"),
                ]),
            ),
            TaxonomyNode(
                id="inclination",
                name="Inclination angle of stratum",
                color="#a855f7",
                children=_leaves([
                    ("inclination-1", "1 degree"),
                    ("inclination-3", "3 degrees"),
                    ("inclination-5", "5 degrees"),
                ]),
            ),
        ],
    )
