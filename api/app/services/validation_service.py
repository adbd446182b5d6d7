"""
Validation service: consistency checks over the stored dataset.
"""
import logging
from collections import Counter
from typing import List

from pydantic import ValidationError as PydanticValidationError

from app.core.data_store import DatasetSnapshot
from app.schemas.admin import DataQualityReport, DataQualityStats
from app.schemas.resource import LearningResource
from app.services.field_rules import FSI_HOURS_RANGES
from app.services.language_service import adapt_language_data, raw_category, raw_hours

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def _missing_fields(raw: dict) -> List[str]:
    missing = []
    if not raw.get("id"):
        missing.append("id")
    if not raw.get("name"):
        missing.append("name")
    if raw_category(raw) is None:
        missing.append("fsi.category")
    if raw_hours(raw) is None:
        missing.append("fsi.hours")
    return missing


def validate_dataset(snapshot: DatasetSnapshot) -> DataQualityReport:
    """
    Check the dataset for problems an admin should fix.

    Errors: duplicate ids, missing required fields.
    Warnings: duplicate names, hours outside the category's usual range,
    detail scores outside 1-5, malformed resources, resources or culture
    records for unknown language ids.
    """
    errors = []
    warnings = []

    seen_ids = set()
    seen_names = set()
    fsi_distribution: Counter = Counter()
    family_distribution: Counter = Counter()

    for position, raw in enumerate(snapshot.languages, start=1):
        label = raw.get("id") or f"#{position}"
        missing = _missing_fields(raw)
        if missing:
            errors.append(f"Language {label}: missing {', '.join(missing)}")

        language = adapt_language_data(raw)
        if language.id in seen_ids:
            errors.append(f"Duplicate language id: {language.id}")
        seen_ids.add(language.id)

        name_key = language.name.lower()
        if name_key in seen_names:
            warnings.append(f"Duplicate language name: {language.name}")
        seen_names.add(name_key)

        low, high = FSI_HOURS_RANGES[language.fsi.category]
        if not low <= language.fsi.hours <= high:
            warnings.append(
                f"Language {label}: {language.fsi.hours} study hours is outside the usual "
                f"{low}-{high} range for category {language.fsi.category}"
            )

        for field, score in language.fsi.details.model_dump().items():
            if not MIN_SCORE <= score <= MAX_SCORE:
                warnings.append(f"Language {label}: {field} score {score} is outside {MIN_SCORE}-{MAX_SCORE}")

        fsi_distribution[language.fsi.category] += 1
        family_distribution[language.family] += 1

    total_resources = 0
    for language_id, items in snapshot.resources.items():
        if language_id not in seen_ids:
            warnings.append(f"Learning resources for unknown language id: {language_id}")
        for index, item in enumerate(items, start=1):
            try:
                LearningResource.model_validate(item)
            except PydanticValidationError:
                warnings.append(f"Learning resource {index} for {language_id} is malformed")
                continue
            total_resources += 1

    for language_id in snapshot.culture:
        if language_id not in seen_ids:
            warnings.append(f"Culture info for unknown language id: {language_id}")

    stats = DataQualityStats(
        total_languages=len(snapshot.languages),
        total_resources=total_resources,
        languages_with_resources=sum(1 for items in snapshot.resources.values() if items),
        languages_with_culture=len(snapshot.culture),
        fsi_distribution=dict(sorted(fsi_distribution.items())),
        family_distribution=dict(sorted(family_distribution.items())),
    )

    if errors:
        logger.warning(f"Dataset validation found {len(errors)} errors and {len(warnings)} warnings")

    return DataQualityReport(valid=not errors, errors=errors, warnings=warnings, stats=stats)
