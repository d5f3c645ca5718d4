"""Generate the dike settlement checklist and write it to disk.

Uses the built-in taxonomy unless a taxonomy JSON document is given. The
output format follows the file extension (.csv or .xlsx).

Usage:
    python -m scripts.build_checklist out/checklist.csv
    python -m scripts.build_checklist --taxonomy my_tree.json out/checklist.xlsx
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dikelab.engine.generator import count_combinations, generate_checklist
from dikelab.export.csv_export import checklist_to_csv
from dikelab.export.excel_export import ChecklistExcelExporter
from dikelab.taxonomy.accessors import factor_values, parse_taxonomy
from dikelab.taxonomy.defaults import default_taxonomy


def _print_summary(source: str, total: int, counts: dict[str, int]) -> None:
    w = 60
    print("=" * w)
    print("  DikeLab Checklist Builder")
    print(f"  {source}")
    print("=" * w)
    for factor, n in counts.items():
        print(f"  {factor:<18} {n:>4} values")
    print(f"  {'Combinations':<18} {total:>4}")


def main(argv: list[str] | None = None) -> None:
    """Build the checklist file."""
    parser = argparse.ArgumentParser(
        description="Generate the dike settlement factor checklist",
    )
    parser.add_argument("output", type=Path, help="Output path (.csv or .xlsx)")
    parser.add_argument(
        "--taxonomy", type=Path, default=None,
        help="Taxonomy JSON document (default: built-in taxonomy)",
    )
    args = parser.parse_args(argv)

    suffix = args.output.suffix.lower()
    if suffix not in (".csv", ".xlsx"):
        parser.error("output must end in .csv or .xlsx")

    if args.taxonomy:
        try:
            taxonomy = parse_taxonomy(args.taxonomy.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"  ! {exc}", file=sys.stderr)
            sys.exit(1)
        source = str(args.taxonomy)
    else:
        taxonomy = default_taxonomy()
        source = "built-in taxonomy"

    items = generate_checklist(taxonomy)
    _print_summary(
        source,
        count_combinations(taxonomy),
        {str(f): len(vals) for f, vals in factor_values(taxonomy).items()},
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        args.output.write_text(checklist_to_csv(items), encoding="utf-8")
    else:
        args.output.write_bytes(ChecklistExcelExporter().export(items))

    print()
    print(f"  Wrote {len(items)} rows to {args.output}")
    print("=" * 60)


if __name__ == "__main__":
    main()
