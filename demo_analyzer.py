"""
Demo: Run analyzer on the example catalog and output the report.
"""

from taskgen.analyzer import analyze_catalog, check_answer_shapes
from taskgen.examples import build_example_catalog, example_answers
from taskgen.registry import load_registry
from taskgen.serialization import catalog_to_yaml


def print_report(report, registry):
    """Pretty-print a CatalogReport."""
    print()
    print("=" * 70)
    print(f"CATALOG ANALYSIS REPORT (field registry {registry.version})")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Entries:         {report.total_entries}")
    print(f"  Ordinary Entries:      {report.ordinary_entries}")
    print(f"  Parent Containers:     {report.parent_containers}")
    print(f"  Unconditional:         {report.unconditional_entries}")
    print()

    print("📈 FIELD ANALYSIS")
    print(f"  Fields Referenced:     {len(report.field_usage)} of {len(registry)} known")
    print(f"  Unknown Fields:        {sorted(report.unknown_fields) or 'None'}")
    if report.field_usage:
        print("  Field Usage:")
        for name, count in sorted(report.field_usage.items()):
            info = registry.get(name)
            domain = info.domain.value if info else "unknown"
            print(f"    {name} ({domain}): {count} entr{'y' if count == 1 else 'ies'}")
    print()

    if report.warnings:
        print("⚠️  WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("✨ NO WARNINGS - Catalog looks clean!")
    print()


if __name__ == "__main__":
    registry = load_registry()
    catalog = build_example_catalog()

    report = analyze_catalog(catalog, registry)
    print_report(report, registry)

    mismatches = check_answer_shapes(example_answers(), registry)
    print(f"Answer shape mismatches: {len(mismatches)}")
    for mismatch in mismatches:
        print(f"  - {mismatch.describe()}")

    # Also save to YAML for inspection
    with open("example_catalog_output.yaml", "w") as f:
        f.write(catalog_to_yaml(catalog))
    print("✅ Catalog exported to example_catalog_output.yaml")
