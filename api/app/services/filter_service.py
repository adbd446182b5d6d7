"""
Filter service for parsing and applying language filters, search and sorting.
"""
from typing import List, Optional, Tuple

import jellyfish

from app.core.exceptions import ValidationError
from app.models.enums import LanguageSortBy
from app.schemas.filter import FilterOptions, LanguageFilter, SearchResult
from app.schemas.language import Language

# Search field weights: name, native name, family, regions
FIELD_WEIGHTS = {
    "name": 1.0,
    "native_name": 0.8,
    "family": 0.6,
    "regions": 0.4,
}
SEARCH_THRESHOLD = 0.25
MAX_SEARCH_RESULTS = 50


# ============================================================================
# Parameter Parsing Helpers
# ============================================================================

def parse_csv(value: Optional[str]) -> List[str]:
    """Parse a comma-separated query parameter into a list of stripped values."""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


def parse_fsi_categories(value: Optional[str]) -> List[int]:
    """Parse fsi_categories parameter into a list of category integers."""
    categories = []
    for part in parse_csv(value):
        try:
            category = int(part)
        except ValueError as exc:
            raise ValidationError("fsi_categories must be comma-separated integers") from exc
        if category < 0 or category > 5:
            raise ValidationError(f"Invalid FSI category: {category}. Must be between 0 and 5")
        categories.append(category)
    return categories


def build_language_filter(
    fsi_categories: Optional[str] = None,
    families: Optional[str] = None,
    regions: Optional[str] = None,
    search: Optional[str] = None,
    difficulty_min: Optional[int] = None,
    difficulty_max: Optional[int] = None,
    hours_min: Optional[int] = None,
    hours_max: Optional[int] = None,
    speakers_min: Optional[int] = None,
    speakers_max: Optional[int] = None,
    sort_by: LanguageSortBy = LanguageSortBy.NAME,
) -> LanguageFilter:
    """Build a LanguageFilter from raw query parameters."""
    return LanguageFilter(
        fsi_categories=parse_fsi_categories(fsi_categories),
        families=parse_csv(families),
        regions=parse_csv(regions),
        search=search.strip() if search and search.strip() else None,
        difficulty_min=difficulty_min,
        difficulty_max=difficulty_max,
        hours_min=hours_min,
        hours_max=hours_max,
        speakers_min=speakers_min,
        speakers_max=speakers_max,
        sort_by=sort_by,
    )


# ============================================================================
# Search Helpers
# ============================================================================

def field_score(query: str, value: str) -> float:
    """Score how well a lowercased query matches a lowercased field value."""
    if not value:
        return 0.0
    if value == query:
        return 1.0
    if value.startswith(query):
        return 0.9
    if query in value:
        return 0.7
    # Fuzzy match on edit distance
    distance = jellyfish.levenshtein_distance(query, value)
    similarity = 1 - distance / max(len(query), len(value))
    return similarity * 0.5 if similarity > 0.3 else 0.0


def _search_fields(language: Language) -> dict:
    return {
        "name": language.name.lower(),
        "native_name": language.native_name.lower(),
        "family": language.family.lower(),
        "regions": " ".join(language.regions).lower(),
    }


def score_language(query: str, language: Language) -> Tuple[float, List[str]]:
    """Weighted match score of a language and the fields that contain the query."""
    fields = _search_fields(language)
    # Best weighted field wins
    score = max(field_score(query, fields[field]) * weight for field, weight in FIELD_WEIGHTS.items())

    matched = [field for field in ("name", "native_name", "family") if query in fields[field]]
    if any(query in region.lower() for region in language.regions):
        matched.append("regions")
    return score, matched


def search_languages(query: str, languages: List[Language]) -> List[SearchResult]:
    """Fuzzy search, best score first, capped at MAX_SEARCH_RESULTS."""
    normalized = query.strip().lower()
    if not normalized:
        return []

    results = []
    for language in languages:
        score, matched = score_language(normalized, language)
        if score >= SEARCH_THRESHOLD:
            results.append(SearchResult(language=language, score=round(score, 4), matched_fields=matched))

    results.sort(key=lambda result: result.score, reverse=True)
    return results[:MAX_SEARCH_RESULTS]


# ============================================================================
# Filter Building Helpers
# ============================================================================

def _in_range(value: int, low: Optional[int], high: Optional[int]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def sort_languages(languages: List[Language], sort_by: LanguageSortBy) -> List[Language]:
    """Return languages sorted by the requested order; ties fall back to name."""
    if sort_by == LanguageSortBy.DIFFICULTY_ASC:
        return sorted(languages, key=lambda lang: (lang.fsi.category, lang.name))
    if sort_by == LanguageSortBy.DIFFICULTY_DESC:
        return sorted(languages, key=lambda lang: (-lang.fsi.category, lang.name))
    if sort_by == LanguageSortBy.HOURS_ASC:
        return sorted(languages, key=lambda lang: (lang.fsi.hours, lang.name))
    if sort_by == LanguageSortBy.HOURS_DESC:
        return sorted(languages, key=lambda lang: (-lang.fsi.hours, lang.name))
    if sort_by == LanguageSortBy.SPEAKERS_ASC:
        return sorted(languages, key=lambda lang: (lang.speakers, lang.name))
    if sort_by == LanguageSortBy.SPEAKERS_DESC:
        return sorted(languages, key=lambda lang: (-lang.speakers, lang.name))
    return sorted(languages, key=lambda lang: lang.name.lower())


def apply_language_filter(languages: List[Language], language_filter: LanguageFilter) -> List[Language]:
    """
    Apply all filters in order: categories, families, regions, ranges, then search.

    When a search query is present, results are ordered by match score;
    otherwise they are ordered by `sort_by`.
    """
    result = list(languages)

    if language_filter.fsi_categories:
        result = [lang for lang in result if lang.fsi.category in language_filter.fsi_categories]

    if language_filter.families:
        families = {family.lower() for family in language_filter.families}
        result = [lang for lang in result if lang.family.lower() in families]

    if language_filter.regions:
        regions = {region.lower() for region in language_filter.regions}
        result = [
            lang for lang in result
            if any(region.lower() in regions for region in lang.regions)
        ]

    result = [
        lang for lang in result
        if _in_range(lang.difficulty.overall, language_filter.difficulty_min, language_filter.difficulty_max)
        and _in_range(lang.fsi.hours, language_filter.hours_min, language_filter.hours_max)
        and _in_range(lang.speakers, language_filter.speakers_min, language_filter.speakers_max)
    ]

    if language_filter.search:
        return [search_result.language for search_result in search_languages(language_filter.search, result)]

    return sort_languages(result, language_filter.sort_by)


def build_filter_options(languages: List[Language]) -> FilterOptions:
    """Available filter values and numeric bounds for a set of languages."""
    if not languages:
        return FilterOptions(
            fsi_categories=[], families=[], regions=[],
            difficulty_bounds=[0, 0], hours_bounds=[0, 0], speakers_bounds=[0, 0],
        )

    difficulties = [lang.difficulty.overall for lang in languages]
    hours = [lang.fsi.hours for lang in languages]
    speakers = [lang.speakers for lang in languages]

    return FilterOptions(
        fsi_categories=sorted({lang.fsi.category for lang in languages}),
        families=sorted({lang.family for lang in languages}),
        regions=sorted({region for lang in languages for region in lang.regions}),
        difficulty_bounds=[min(difficulties), max(difficulties)],
        hours_bounds=[min(hours), max(hours)],
        speakers_bounds=[min(speakers), max(speakers)],
    )
