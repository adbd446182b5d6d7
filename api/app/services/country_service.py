"""
Country service: which dataset languages are spoken in a country.
"""
from typing import List, Optional

from app.core.data_store import DataStore
from app.schemas.family import CountryLanguageInfo
from app.schemas.language import Language
from app.services.language_service import get_language_by_id

DEFAULT_COUNTRY_COLOR = "#94a3b8"

# Upper bound of average overall difficulty -> map colour
DIFFICULTY_COLORS = [
    (0, "#6c757d"),
    (3, "#28a745"),
    (4, "#ffc107"),
    (6, "#fd7e14"),
    (7, "#dc3545"),
    (9, "#6f42c1"),
]

# country -> (primary language id, secondary language ids, region)
COUNTRY_LANGUAGES = {
    "United States of America": ("en", ["es"], "North America"),
    "Canada": ("en", ["fr"], "North America"),
    "Mexico": ("es", [], "North America"),
    "Brazil": ("pt", [], "South America"),
    "Argentina": ("es", [], "South America"),
    "Colombia": ("es", [], "South America"),
    "Peru": ("es", [], "South America"),
    "Venezuela": ("es", [], "South America"),
    "Chile": ("es", [], "South America"),
    "Ecuador": ("es", [], "South America"),
    "Spain": ("es", [], "Europe"),
    "France": ("fr", [], "Europe"),
    "Italy": ("it", [], "Europe"),
    "Portugal": ("pt", [], "Europe"),
    "Germany": ("de", [], "Europe"),
    "Netherlands": ("nl", [], "Europe"),
    "Sweden": ("sv", [], "Europe"),
    "Norway": ("no", [], "Europe"),
    "Poland": ("pl", [], "Europe"),
    "Russian Federation": ("ru", [], "Europe/Asia"),
    "Romania": ("ro", [], "Europe"),
    "Turkey": ("tr", [], "Europe/Asia"),
    "Austria": ("de", [], "Europe"),
    "Switzerland": ("de", ["fr", "it"], "Europe"),
    "Belgium": ("nl", ["fr"], "Europe"),
    "United Kingdom": ("en", [], "Europe"),
    "Ireland": ("en", [], "Europe"),
    "China": ("zh", ["yue"], "Asia"),
    "Japan": ("ja", [], "Asia"),
    "South Korea": ("ko", [], "Asia"),
    "India": ("hi", ["bn", "en", "ur"], "Asia"),
    "Indonesia": ("id", [], "Asia"),
    "Malaysia": ("ms", ["en"], "Asia"),
    "Thailand": ("th", [], "Asia"),
    "Vietnam": ("vi", [], "Asia"),
    "Iran": ("fa", [], "Asia"),
    "Pakistan": ("ur", ["en"], "Asia"),
    "Bangladesh": ("bn", ["en"], "Asia"),
    "Israel": ("he", ["ar"], "Asia"),
    "Singapore": ("en", ["zh", "ms"], "Asia"),
    "Taiwan": ("zh", [], "Asia"),
    "Hong Kong": ("yue", ["en", "zh"], "Asia"),
    "Saudi Arabia": ("ar", [], "Middle East"),
    "Egypt": ("ar", [], "Middle East/Africa"),
    "Iraq": ("ar", [], "Middle East"),
    "Jordan": ("ar", [], "Middle East"),
    "Lebanon": ("ar", ["fr"], "Middle East"),
    "Syria": ("ar", [], "Middle East"),
    "United Arab Emirates": ("ar", ["en"], "Middle East"),
    "Nigeria": ("en", [], "Africa"),
    "South Africa": ("en", [], "Africa"),
    "Tanzania": ("sw", ["en"], "Africa"),
    "Kenya": ("sw", ["en"], "Africa"),
    "Uganda": ("en", ["sw"], "Africa"),
    "Algeria": ("ar", ["fr"], "Africa"),
    "Morocco": ("ar", ["fr"], "Africa"),
    "Tunisia": ("ar", ["fr"], "Africa"),
    "Senegal": ("fr", [], "Africa"),
    "Ivory Coast": ("fr", [], "Africa"),
    "Democratic Republic of the Congo": ("fr", ["sw"], "Africa"),
    "Angola": ("pt", [], "Africa"),
    "Mozambique": ("pt", [], "Africa"),
    "Australia": ("en", [], "Oceania"),
    "New Zealand": ("en", [], "Oceania"),
    "Kazakhstan": ("ru", [], "Asia"),
    "Belarus": ("ru", [], "Europe"),
    "Kyrgyzstan": ("ru", [], "Asia"),
    "Moldova": ("ro", ["ru"], "Europe"),
    "Cyprus": ("tr", ["en"], "Europe"),
    "Finland": ("sv", [], "Europe"),
    "Luxembourg": ("de", ["fr"], "Europe"),
    "Liechtenstein": ("de", [], "Europe"),
    "San Marino": ("it", [], "Europe"),
    "Vatican City": ("it", [], "Europe"),
    "Suriname": ("nl", [], "South America"),
    "Brunei": ("ms", ["en"], "Asia"),
    "Afghanistan": ("fa", [], "Asia"),
    "Tajikistan": ("fa", ["ru"], "Asia"),
    "Cuba": ("es", [], "North America"),
    "Guatemala": ("es", [], "North America"),
    "Cape Verde": ("pt", [], "Africa"),
    "Macau": ("yue", ["zh", "pt"], "Asia"),
    "North Korea": ("ko", [], "Asia"),
}


def get_country_color(difficulty_avg: float) -> str:
    """Map colour for a country's average language difficulty."""
    for upper_bound, color in DIFFICULTY_COLORS:
        if difficulty_avg <= upper_bound:
            return color
    return DEFAULT_COUNTRY_COLOR


def _find_country(country: str) -> Optional[str]:
    if country in COUNTRY_LANGUAGES:
        return country
    lowered = country.strip().lower()
    for name in COUNTRY_LANGUAGES:
        if name.lower() == lowered:
            return name
    return None


def get_country_language_info(store: DataStore, country: str) -> Optional[CountryLanguageInfo]:
    """
    Languages spoken in a country, resolved against the dataset.

    Args:
        store: Data store to resolve language ids against
        country: Country name, matched case-insensitively

    Returns:
        Country info with primary language first, or None for an unknown country.
        Language ids missing from the dataset are left out of `languages`.
    """
    name = _find_country(country)
    if name is None:
        return None

    primary, secondary, region = COUNTRY_LANGUAGES[name]
    languages: List[Language] = []
    for language_id in [primary] + secondary:
        language = get_language_by_id(store, language_id)
        if language is not None:
            languages.append(language)

    difficulty_avg = (
        round(sum(language.difficulty.overall for language in languages) / len(languages), 1)
        if languages else 0.0
    )
    return CountryLanguageInfo(
        country=name,
        primary=primary,
        secondary=list(secondary),
        region=region,
        difficulty_avg=difficulty_avg,
        color=get_country_color(difficulty_avg) if languages else DEFAULT_COUNTRY_COLOR,
        languages=languages,
    )
