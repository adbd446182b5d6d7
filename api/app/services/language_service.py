"""
Language service: normalizes raw records and assembles language detail views.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.data_store import DataStore, DatasetSnapshot
from app.models.enums import ResourceType
from app.schemas.culture import CultureInfo
from app.schemas.language import (
    CompareLanguagesResponse,
    ExtendedLanguageDetail,
    FSIDetails,
    FSIInfo,
    Geography,
    Language,
    LanguageDifficulty,
    SpeakerStats,
)
from app.schemas.resource import LearningResource
from app.services.field_rules import (
    clamp_category,
    default_color,
    default_culture_info,
    default_description,
    default_difficulty,
    default_fsi_details,
    estimate_native_speakers,
    format_speakers,
    infer_continents,
    speaker_rank,
    synthesize_culture_scores,
)

logger = logging.getLogger(__name__)

FEATURED_LANGUAGE_KEYS = ["spanish", "french", "german", "mandarin"]
MAX_FEATURED = 4

DEFAULT_FLAG = "🏳️"
DEFAULT_WRITING_SYSTEM = "Latin"
UNKNOWN = "Unknown"

PRIMARY_COUNTRY_COUNT = 3


# ============================================================================
# Raw record helpers
# ============================================================================

def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under any of the alias keys that is not None or blank."""
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        # int() raises OverflowError for inf, ValueError for nan
        return default


def slugify_name(name: str) -> str:
    """'Mandarin Chinese' -> 'mandarin-chinese'."""
    return re.sub(r"\s+", "-", name.strip().lower())


def _raw_fsi(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    fsi = raw.get("fsi")
    return fsi if isinstance(fsi, Mapping) else {}


def raw_category(raw: Mapping[str, Any]) -> Any:
    """Unparsed FSI category of a raw record under any of its aliases, or None."""
    fsi = _raw_fsi(raw)
    if fsi.get("category") is not None:
        return fsi.get("category")
    if raw.get("category") is not None:
        return raw.get("category")
    # Older flat records stored the category under `difficulty`
    difficulty = raw.get("difficulty")
    if difficulty is not None and not isinstance(difficulty, Mapping):
        return difficulty
    return None


def raw_hours(raw: Mapping[str, Any]) -> Any:
    fsi = _raw_fsi(raw)
    if fsi.get("hours") is not None:
        return fsi.get("hours")
    return raw.get("hours")


def _adapt_details(raw_details: Any, category: int) -> FSIDetails:
    if isinstance(raw_details, Mapping):
        try:
            return FSIDetails.model_validate(dict(raw_details))
        except PydanticValidationError:
            logger.warning(f"Ignoring malformed FSI details {raw_details!r}, using category {category} defaults")
    return default_fsi_details(category)


def _adapt_difficulty(raw: Mapping[str, Any], category: int, details: FSIDetails) -> LanguageDifficulty:
    for key in ("difficulty", "difficulty_scores", "difficultyScores"):
        value = raw.get(key)
        if isinstance(value, Mapping):
            try:
                return LanguageDifficulty.model_validate(dict(value))
            except PydanticValidationError:
                logger.warning(f"Ignoring malformed difficulty scores {value!r}")
    return default_difficulty(category, details)


def _adapt_hours_range(value: Any) -> Optional[tuple]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        low, high = value
        return (_as_int(low), _as_int(high))
    return None


# ============================================================================
# Adapter
# ============================================================================

def adapt_language_data(raw: Mapping[str, Any]) -> Language:
    """
    Normalize one loosely-typed raw record into a canonical Language.

    Reads every historical alias of each field, fills derived fields from the
    FSI category and never mutates `raw`.

    Args:
        raw: Record as stored on disk or posted by the admin editor

    Returns:
        Fully populated Language with a category clamped to [0, 5]
    """
    name = str(_first_present(raw, "name") or UNKNOWN)
    language_id = _first_present(raw, "id")
    language_id = str(language_id) if language_id is not None else slugify_name(name)

    category = clamp_category(raw_category(raw))
    fsi_raw = _raw_fsi(raw)
    details = _adapt_details(fsi_raw.get("details"), category)

    family = str(_first_present(raw, "family") or UNKNOWN)
    regions = _first_present(raw, "regions", "countries") or []
    if isinstance(regions, str):
        regions = [part.strip() for part in regions.split(";") if part.strip()]

    return Language(
        id=language_id,
        name=name,
        native_name=str(_first_present(raw, "native_name", "nativeName", "localName") or name),
        regions=[str(region) for region in regions],
        family=family,
        subfamily=str(_first_present(raw, "subfamily") or family),
        writing_system=str(_first_present(raw, "writing_system", "writingSystem") or DEFAULT_WRITING_SYSTEM),
        speakers=_as_int(_first_present(raw, "speakers", "speakersTotal", "speakers_total")),
        flag_emoji=str(_first_present(raw, "flag_emoji", "flagEmoji", "flag") or DEFAULT_FLAG),
        color=str(_first_present(raw, "color") or default_color(category)),
        fsi=FSIInfo(
            category=category,
            hours=_as_int(raw_hours(raw)),
            description=str(_first_present(fsi_raw, "description") or default_description(category)),
            details=details,
            hours_range=_adapt_hours_range(fsi_raw.get("hours_range") or fsi_raw.get("hoursRange")),
        ),
        difficulty=_adapt_difficulty(raw, category, details),
    )


def language_to_record(language: Language) -> Dict[str, Any]:
    """Canonical on-disk shape of a language."""
    return language.model_dump(mode="json", exclude_none=True)


def _find_raw(snapshot: DatasetSnapshot, language_id: str) -> Optional[Mapping[str, Any]]:
    # Exact id match only; matching on lowercased names produced duplicate routes
    for raw in snapshot.languages:
        if raw.get("id") == language_id:
            return raw
    return None


def _has_required_fields(raw: Mapping[str, Any]) -> bool:
    return (
        _first_present(raw, "id") is not None
        and _first_present(raw, "name") is not None
        and raw_category(raw) is not None
        and raw_hours(raw) is not None
    )


# ============================================================================
# Read API
# ============================================================================

def get_all_languages(store: DataStore) -> List[Language]:
    """All languages in store order."""
    return [adapt_language_data(raw) for raw in store.snapshot().languages]


def get_language_by_id(store: DataStore, language_id: str) -> Optional[Language]:
    """Exact-id lookup. Returns None when the id is unknown."""
    raw = _find_raw(store.snapshot(), language_id)
    return adapt_language_data(raw) if raw is not None else None


def get_featured_languages(store: DataStore) -> List[Language]:
    """Up to four notable languages for the home page; may return fewer."""
    featured = []
    for raw in store.snapshot().languages:
        name = str(raw.get("name") or "").lower()
        slug = slugify_name(name)
        language_id = str(raw.get("id") or "").lower()
        if any(key in slug or key in name or key in language_id for key in FEATURED_LANGUAGE_KEYS):
            featured.append(adapt_language_data(raw))
        if len(featured) == MAX_FEATURED:
            break
    return featured


def compare_languages(store: DataStore, language_ids: List[str]) -> CompareLanguagesResponse:
    """Known languages in request order; unknown ids are reported, not raised."""
    languages = []
    not_found = []
    for language_id in language_ids:
        language = get_language_by_id(store, language_id)
        if language is None:
            not_found.append(language_id)
        elif all(existing.id != language.id for existing in languages):
            languages.append(language)
    return CompareLanguagesResponse(languages=languages, not_found=not_found)


def get_learning_resources(store: DataStore, language_id: str) -> List[LearningResource]:
    """Resources for a language; languages without an entry get an empty list."""
    resources = []
    for raw in store.snapshot().resources.get(language_id, []):
        try:
            resources.append(LearningResource.model_validate(raw))
        except PydanticValidationError as exc:
            logger.warning(f"Skipping malformed resource for {language_id}: {exc.errors()}")
    return resources


def has_custom_culture_info(store: DataStore, language_id: str) -> bool:
    return language_id in store.snapshot().culture


def get_culture_info(store: DataStore, language_id: str, name: Optional[str] = None) -> CultureInfo:
    """Stored culture record, or the template default when none is stored."""
    raw = store.snapshot().culture.get(language_id)
    if raw is not None:
        try:
            return CultureInfo.model_validate(raw)
        except PydanticValidationError as exc:
            logger.warning(f"Malformed culture record for {language_id}, using default: {exc.errors()}")
    return default_culture_info(language_id, name)


def group_resources_by_type(resources: List[LearningResource]) -> Dict[ResourceType, List[LearningResource]]:
    grouped: Dict[ResourceType, List[LearningResource]] = {}
    for resource in resources:
        grouped.setdefault(resource.type, []).append(resource)
    return grouped


def get_language_detail_data(store: DataStore, language_id: str) -> Optional[ExtendedLanguageDetail]:
    """
    Assemble the detail view for a language.

    Returns None when the id is unknown or when the stored record lacks any of
    id, name, FSI category or FSI hours.
    """
    raw = _find_raw(store.snapshot(), language_id)
    if raw is None:
        return None
    if not _has_required_fields(raw):
        logger.warning(f"Language record {language_id!r} is missing required fields, treating as not found")
        return None

    language = adapt_language_data(raw)
    native_count = estimate_native_speakers(language.id, language.speakers)

    return ExtendedLanguageDetail(
        **language.model_dump(),
        speaker_stats=SpeakerStats(
            total=format_speakers(language.speakers),
            native=format_speakers(native_count),
            total_count=language.speakers,
            native_count=native_count,
            rank=speaker_rank(language.speakers),
        ),
        geography=Geography(
            primary_countries=language.regions[:PRIMARY_COUNTRY_COUNT],
            secondary_countries=language.regions[PRIMARY_COUNTRY_COUNT:],
            continents=infer_continents(language.regions),
        ),
        learning_resources=group_resources_by_type(get_learning_resources(store, language.id)),
        culture=get_culture_info(store, language.id, language.name),
        has_custom_culture=has_custom_culture_info(store, language.id),
        cultural_info=synthesize_culture_scores(language.fsi.category, language.speakers),
    )
