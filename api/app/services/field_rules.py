"""
Default values and derived fields for language records.

Every function here is total: unrecognized input degrades to a safe default
instead of raising, so callers never branch on "category not found".
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional

from app.schemas.culture import CultureInfo, CultureScores
from app.schemas.language import FSIDetails, LanguageDifficulty

MIN_CATEGORY = 0
MAX_CATEGORY = 5
FALLBACK_CATEGORY = 3

# (grammar, vocabulary, pronunciation, writing, cultural)
FSI_DETAIL_SCORES = {
    0: (1, 1, 1, 1, 1),  # native
    1: (2, 3, 2, 1, 2),
    2: (3, 3, 3, 2, 3),
    3: (4, 4, 4, 3, 4),
    4: (4, 5, 5, 4, 4),
    5: (5, 5, 5, 5, 5),
}

FSI_DESCRIPTIONS = {
    0: "Native Language",
    1: "Easiest for English Speakers",
    2: "Moderate Difficulty",
    3: "Significant Difficulty",
    4: "Hard for English Speakers",
    5: "Hardest for English Speakers",
}

FSI_COLORS = {
    0: "#6c757d",  # gray
    1: "#22c55e",  # green
    2: "#eab308",  # yellow
    3: "#f97316",  # orange
    4: "#ef4444",  # red
    5: "#a855f7",  # purple
}

# Conventional study hours per category (category 1 spans 600-750h)
FSI_DEFAULT_HOURS = {
    0: 0,
    1: 600,
    2: 900,
    3: 1100,
    4: 1800,
    5: 2200,
}

FSI_HOURS_RANGES = {
    0: (0, 0),
    1: (600, 750),
    2: (900, 900),
    3: (1100, 1100),
    4: (1800, 1800),
    5: (2200, 2200),
}

DEFAULT_NATIVE_RATIO = 0.8

# Share of total speakers who speak the language natively
NATIVE_SPEAKER_RATIOS = {
    "en": 0.25,
    "zh": 0.83,
    "es": 0.88,
    "hi": 0.57,
    "ar": 0.86,
    "bn": 0.9,
    "fr": 0.29,
    "ru": 0.59,
    "pt": 0.92,
    "ur": 0.3,
    "id": 0.25,
    "ms": 0.3,
    "de": 0.76,
    "ja": 0.99,
    "sw": 0.08,
    "fa": 0.7,
    "tr": 0.9,
    "ko": 0.99,
    "vi": 0.95,
    "it": 0.95,
    "th": 0.5,
    "pl": 0.95,
    "yue": 0.95,
    "ro": 0.9,
    "nl": 0.95,
    "sv": 0.9,
    "no": 0.95,
    "he": 0.55,
}

COUNTRY_CONTINENTS = {
    # Europe
    "Spain": "Europe",
    "Portugal": "Europe",
    "France": "Europe",
    "Belgium": "Europe",
    "Switzerland": "Europe",
    "Germany": "Europe",
    "Austria": "Europe",
    "Liechtenstein": "Europe",
    "Luxembourg": "Europe",
    "Italy": "Europe",
    "San Marino": "Europe",
    "Vatican City": "Europe",
    "Romania": "Europe",
    "Moldova": "Europe",
    "Netherlands": "Europe",
    "Sweden": "Europe",
    "Finland": "Europe",
    "Norway": "Europe",
    "Denmark": "Europe",
    "Poland": "Europe",
    "Greece": "Europe",
    "Belarus": "Europe",
    "United Kingdom": "Europe",
    "Ireland": "Europe",
    "Russian Federation": "Europe",
    "Russia": "Europe",
    "Cyprus": "Europe",
    # Asia
    "China": "Asia",
    "Taiwan": "Asia",
    "Hong Kong": "Asia",
    "Macau": "Asia",
    "Singapore": "Asia",
    "Japan": "Asia",
    "South Korea": "Asia",
    "North Korea": "Asia",
    "India": "Asia",
    "Pakistan": "Asia",
    "Bangladesh": "Asia",
    "Indonesia": "Asia",
    "Malaysia": "Asia",
    "Brunei": "Asia",
    "Thailand": "Asia",
    "Vietnam": "Asia",
    "Kazakhstan": "Asia",
    "Kyrgyzstan": "Asia",
    "Tajikistan": "Asia",
    "Afghanistan": "Asia",
    "Iran": "Asia",
    "Iraq": "Asia",
    "Israel": "Asia",
    "Jordan": "Asia",
    "Lebanon": "Asia",
    "Syria": "Asia",
    "Saudi Arabia": "Asia",
    "United Arab Emirates": "Asia",
    "Turkey": "Asia",
    # Africa
    "Egypt": "Africa",
    "Algeria": "Africa",
    "Morocco": "Africa",
    "Tunisia": "Africa",
    "Angola": "Africa",
    "Mozambique": "Africa",
    "Cape Verde": "Africa",
    "Senegal": "Africa",
    "Ivory Coast": "Africa",
    "Democratic Republic of the Congo": "Africa",
    "Tanzania": "Africa",
    "Kenya": "Africa",
    "Uganda": "Africa",
    "South Africa": "Africa",
    "Nigeria": "Africa",
    # Americas
    "United States of America": "North America",
    "United States": "North America",
    "Canada": "North America",
    "Mexico": "North America",
    "Cuba": "North America",
    "Guatemala": "North America",
    "Brazil": "South America",
    "Argentina": "South America",
    "Colombia": "South America",
    "Peru": "South America",
    "Venezuela": "South America",
    "Chile": "South America",
    "Ecuador": "South America",
    "Suriname": "South America",
    # Oceania
    "Australia": "Oceania",
    "New Zealand": "Oceania",
}

DEFAULT_ENTERTAINMENT = [
    "Local Music",
    "Traditional Arts",
    "Cultural Festivals",
    "Local Cinema",
    "Traditional Games",
]

DEFAULT_CUISINE = [
    "Traditional Dishes",
    "Local Specialties",
    "Street Food",
    "Regional Cuisine",
    "Local Beverages",
]


def clamp_category(raw: Any) -> int:
    """
    Coerce any input into an FSI category in [0, 5].

    Numbers are truncated and clamped, numeric strings are parsed first.
    Booleans, None, NaN and non-numeric values resolve to 0.
    """
    if raw is None or isinstance(raw, bool):
        return MIN_CATEGORY

    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return MIN_CATEGORY
    else:
        return MIN_CATEGORY

    if math.isnan(number):
        return MIN_CATEGORY
    if math.isinf(number):
        return MAX_CATEGORY if number > 0 else MIN_CATEGORY
    return max(MIN_CATEGORY, min(MAX_CATEGORY, int(number)))


def _table_key(category: Any) -> int:
    """Exact table key for a valid category, otherwise the fallback category."""
    if isinstance(category, bool):
        return FALLBACK_CATEGORY
    if isinstance(category, int) and MIN_CATEGORY <= category <= MAX_CATEGORY:
        return category
    if isinstance(category, float) and category.is_integer() and MIN_CATEGORY <= category <= MAX_CATEGORY:
        return int(category)
    return FALLBACK_CATEGORY


def default_fsi_details(category: Any) -> FSIDetails:
    """Fixed detail quintuple for a category; unknown categories use category 3."""
    grammar, vocabulary, pronunciation, writing, cultural = FSI_DETAIL_SCORES[_table_key(category)]
    return FSIDetails(
        grammar=grammar,
        vocabulary=vocabulary,
        pronunciation=pronunciation,
        writing=writing,
        cultural=cultural,
    )


def default_description(category: Any) -> str:
    return FSI_DESCRIPTIONS[_table_key(category)]


def default_color(category: Any) -> str:
    return FSI_COLORS[_table_key(category)]


def default_hours(category: Any) -> int:
    return FSI_DEFAULT_HOURS[_table_key(category)]


def default_difficulty(category: int, details: FSIDetails) -> LanguageDifficulty:
    """Derive the coarse difficulty scores from the category and detail scores."""
    return LanguageDifficulty(
        overall=category,
        grammar=details.grammar,
        pronunciation=details.pronunciation,
        vocabulary=details.vocabulary,
    )


def native_speaker_ratio(language_id: str) -> float:
    return NATIVE_SPEAKER_RATIOS.get(language_id, DEFAULT_NATIVE_RATIO)


def estimate_native_speakers(language_id: str, total_speakers: int) -> int:
    return int(_round_half_up(total_speakers * native_speaker_ratio(language_id), 0))


def _round_half_up(value: float, digits: int) -> Decimal:
    exponent = Decimal(1).scaleb(-digits)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_speakers(count: int) -> str:
    """
    Human-readable speaker count.

    1_180_000_000 -> "1.2B", 280_000_000 -> "280M", 6_000 -> "6K", 900 -> "900".
    """
    if count >= 1_000_000_000:
        return f"{_round_half_up(count / 1_000_000_000, 1)}B"
    if count >= 1_000_000:
        return f"{_round_half_up(count / 1_000_000, 0)}M"
    if count >= 1_000:
        return f"{_round_half_up(count / 1_000, 0)}K"
    return str(count)


def speaker_rank(count: int) -> int:
    """Global rank bucket from raw speaker count."""
    # The 1.3B and 1.1B buckets overlap, both are rank 1
    if count >= 1_300_000_000:
        return 1
    if count >= 1_100_000_000:
        return 1
    if count >= 500_000_000:
        return 3
    if count >= 300_000_000:
        return 4
    if count >= 200_000_000:
        return 5
    if count >= 100_000_000:
        return 6
    if count >= 50_000_000:
        return 7
    if count >= 10_000_000:
        return 8
    return 9


def infer_continents(regions: Iterable[str]) -> List[str]:
    """Map countries to continents, de-duplicated in first-seen order."""
    continents: List[str] = []
    for region in regions:
        continent = COUNTRY_CONTINENTS.get(region)
        if continent and continent not in continents:
            continents.append(continent)
    return continents or ["Unknown"]


def synthesize_culture_scores(category: int, speakers: int) -> CultureScores:
    """Presentation heuristics for the culture score card."""
    return CultureScores(
        business_use=min(5, category + 1),
        travel_value=min(5, max(1, 6 - category)),
        cultural_richness=4,
        online_presence=5 if speakers > 100_000_000 else 3,
    )


def default_culture_info(language_id: str, name: Optional[str] = None) -> CultureInfo:
    """Template culture record used when a language has no custom entry."""
    label = name or language_id
    return CultureInfo(
        overview=(
            f"{label} is a fascinating language with unique cultural characteristics. "
            "Learning it opens doors to new perspectives and cultural experiences."
        ),
        business_use=(
            f"{label} can be valuable for international business, "
            "especially in regions where it's widely spoken."
        ),
        entertainment=list(DEFAULT_ENTERTAINMENT),
        cuisine=list(DEFAULT_CUISINE),
    )
