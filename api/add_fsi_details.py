"""
Script to add default FSI detail scores to languages that have none.

Languages without `fsi.details` get the fixed scores for their FSI category.
The previous languages.json is backed up before it is rewritten.
"""
import sys
import logging
from typing import Any, Dict, List

from app.core.data_store import LANGUAGES, DataStore
from app.core.exceptions import PersistenceError
from app.services.field_rules import clamp_category, default_fsi_details
from app.services.language_service import raw_category
from app.services.persistence_service import write_file_backup

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def add_missing_details(languages: List[Dict[str, Any]]) -> int:
    """
    Fill in `fsi.details` for every language that lacks it.

    Args:
        languages: Raw language records, updated in place

    Returns:
        Number of languages updated
    """
    updated = 0
    for raw in languages:
        if not isinstance(raw.get("fsi"), dict):
            raw["fsi"] = {}
        fsi = raw["fsi"]
        if isinstance(fsi.get("details"), dict):
            continue
        category = clamp_category(raw_category(raw))
        fsi["details"] = default_fsi_details(category).model_dump()
        logger.info(f"Added category {category} details to {raw.get('id', raw.get('name', '?'))}")
        updated += 1
    return updated


def main(dry_run: bool = False):
    """Main function to add missing FSI details."""
    store = DataStore()
    logger.info(f"Checking {store.path_for(LANGUAGES)} for languages without FSI details...")

    with store.write_lock:
        previous = store.read_text(LANGUAGES)
        languages = store.parse_document(LANGUAGES, previous)
        updated = add_missing_details(languages)

        if updated == 0:
            logger.info("All languages already have FSI details")
            return
        if dry_run:
            logger.info(f"Dry run: {updated} languages would be updated")
            return

        backup_path = write_file_backup(store, LANGUAGES, previous)
        store.write_document(LANGUAGES, languages)

    logger.info(f"Successfully added FSI details to {updated} languages (backup: {backup_path})")


if __name__ == "__main__":
    try:
        main(dry_run="--dry-run" in sys.argv[1:])
    except PersistenceError as e:
        logger.error(f"Failed to add FSI details: {e}")
        sys.exit(1)
