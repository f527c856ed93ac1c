import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from stockroom.config import get_settings
from stockroom.core.errors import InventoryError
from stockroom.core.logging import setup_logging
from stockroom.database import RecordStore, create_db_engine
from stockroom.database.seed import initialize_storage
from stockroom.services.product_service import import_products


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Import products from a CSV file or .xlsx workbook."
    )
    parser.add_argument("--path", required=True, help="Path to .csv or .xlsx file.")
    parser.add_argument("--dry-run", action="store_true", help="Validate without saving.")
    return parser.parse_args(argv)


def main(argv=None):
    settings = get_settings()
    setup_logging(settings)
    args = parse_args(argv)
    path = Path(args.path)

    store = RecordStore(create_db_engine(settings.DATABASE_URL))
    try:
        initialize_storage(store, settings)
        result = import_products(store, path.read_bytes(), path.name, dry_run=args.dry_run)
    except (OSError, InventoryError) as exc:
        raise SystemExit(f"Import failed: {exc}") from exc
    finally:
        store.engine.dispose()

    print(f"{result.imported_count} imported, {result.skipped_count} skipped")
    if result.errors:
        print("Rejected rows:")
        for message in result.errors:
            print(f"  {message}")

    if args.dry_run:
        print("Dry run complete, no changes committed.")
    else:
        print("Import complete.")


if __name__ == "__main__":
    main()
