#!/usr/bin/env python
"""
Validate input data files against schema requirements.

Usage:
    python scripts/validate_inputs.py
    python scripts/validate_inputs.py --data-dir /path/to/data
    python scripts/validate_inputs.py --contract-sheet contracts.csv
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_os.config import config, configure_logging, TABLE_FILES
from portfolio_os.data.csv_import import parse_contract_sheet, read_contract_sheet, validate_client_data
from portfolio_os.data.loader import find_table_file, read_table_file
from portfolio_os.data.schema import SchemaValidationError, check_references, validate_schema

REQUIRED_TABLES = ["clients"]


def validate_file(filepath: Path, table_name: str) -> dict:
    """
    Load one table file and run the non-strict schema checks.

    Returns a dict with path, df (None when missing or unreadable), errors and
    the validate_schema() fields.
    """
    result = {"path": find_table_file(filepath), "df": None, "errors": []}
    if result["path"] is None:
        return result

    try:
        df = read_table_file(filepath)
    except (OSError, ValueError) as e:
        result["errors"].append(f"Failed to load: {e}")
        return result

    result["df"] = df
    result.update(validate_schema(df, table_name, strict=False))
    return result


def report_table(table_key: str, result: dict) -> bool:
    """Print one table's findings. Returns False when the table blocks loading."""
    path = result["path"]
    if path is None:
        required = table_key in REQUIRED_TABLES
        print(f"  ✗ Not found ({'REQUIRED' if required else 'optional'})")
        return not required

    print(f"  ✓ Found: {path.name}")
    for err in result["errors"]:
        print(f"  ✗ Error: {err}")
    if result["df"] is None:
        return False

    ok = True
    print(f"    Rows: {result['total_rows']:,}  Columns: {result['total_columns']}")
    if result["is_valid"]:
        print("  ✓ Schema valid")
    else:
        print(f"  ✗ Missing required: {result['missing_required']}")
        ok = False
    if result["missing_optional"]:
        print(f"  ⚠ Missing optional: {result['missing_optional']}")
    if result["duplicate_ids"]:
        print(f"  ✗ Duplicate ids: {result['duplicate_ids'][:10]}")
        ok = False
    for col, count in result["out_of_range"].items():
        print(f"  ⚠ {count} out-of-range values in {col} (clamped on load)")
    return ok


def validate_tables(processed_dir: Path) -> bool:
    all_valid = True
    frames = {}

    for table_key, filename in TABLE_FILES.items():
        print(f"Validating: {table_key}")
        print("-" * 40)
        result = validate_file(processed_dir / filename, table_key)
        all_valid = report_table(table_key, result) and all_valid
        if result["df"] is not None:
            frames[table_key] = result["df"]
        print()

    if "clients" in frames:
        print("Cross-table references")
        print("-" * 40)
        problems = check_references(frames["clients"], frames.get("revenues"), frames.get("partners"))
        for problem in problems:
            print(f"  ⚠ {problem}")
        if not problems:
            print("  ✓ All client ids resolve")
        print()

    return all_valid


def validate_contract_sheet(path: Path) -> bool:
    print(f"Validating contract sheet: {path}")
    print("-" * 40)
    try:
        raw = read_contract_sheet(str(path))
        clients_df, revenues_df = parse_contract_sheet(raw)
    except (OSError, SchemaValidationError) as e:
        print(f"  ✗ Error: {e}")
        return False

    report = validate_client_data(clients_df, revenues_df)
    print(f"  Rows: {report['client_count']:,}")
    print(f"  Valid clients: {report['valid_client_count']:,}")
    for issue in report["issues"]:
        print(f"  ✗ {issue}")
    for warning in report["warnings"]:
        print(f"  ⚠ {warning}")
    print()
    return report["is_valid"]


def main():
    parser = argparse.ArgumentParser(description="Validate input data files")
    parser.add_argument("--data-dir", type=str, default=None, help="Override data directory")
    parser.add_argument(
        "--contract-sheet",
        type=str,
        default=None,
        help="Validate a contract-sheet CSV instead of the processed tables",
    )
    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Data Input Validation")
    print("=" * 60)

    if args.contract_sheet:
        all_valid = validate_contract_sheet(Path(args.contract_sheet))
    else:
        data_dir = Path(args.data_dir) if args.data_dir else config.data_dir
        processed_dir = data_dir / "processed"
        print(f"Source directory: {processed_dir}")
        print()
        all_valid = validate_tables(processed_dir)

    print("=" * 60)
    if all_valid:
        print("✓ All validations passed")
        sys.exit(0)
    print("✗ Validation failed - see errors above")
    sys.exit(1)


if __name__ == "__main__":
    main()
