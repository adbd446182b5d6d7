"""
Family service: language family reference data and per-family statistics.
"""
import re
from typing import Dict, List, Optional

from app.core.data_store import DataStore
from app.schemas.family import LanguageFamily, LanguageFamilyDetail
from app.schemas.language import Language
from app.services.language_service import get_all_languages

DEFAULT_FAMILY_COLOR = "#6b7280"

FAMILY_COLORS = {
    "indo-european": "#3b82f6",
    "sino-tibetan": "#ef4444",
    "afro-asiatic": "#f59e0b",
    "niger-congo": "#10b981",
    "austronesian": "#8b5cf6",
    "japonic": "#e11d48",
    "koreanic": "#06b6d4",
    "turkic": "#84cc16",
    "uralic": "#6366f1",
    "dravidian": "#d946ef",
    "mongolic": "#f97316",
    "kra-dai": "#14b8a6",
    "austroasiatic": "#a855f7",
}

# id -> (name, description, subfamilies, representative language ids, regions)
LANGUAGE_FAMILIES: Dict[str, tuple] = {
    "indo-european": (
        "Indo-European",
        "The most widespread family, covering most European languages and many of South Asia",
        ["Romance", "Germanic", "Slavic", "Indo-Aryan", "Iranian", "Hellenic", "Baltic"],
        ["en", "es", "fr", "de", "ru", "hi"],
        ["Europe", "South Asia", "North America", "South America"],
    ),
    "sino-tibetan": (
        "Sino-Tibetan",
        "The second largest family, made up of the Chinese languages and Tibeto-Burman",
        ["Sinitic"],
        ["zh", "yue"],
        ["East Asia"],
    ),
    "afro-asiatic": (
        "Afro-Asiatic",
        "Semitic, Chadic and related languages of North Africa and West Asia",
        ["Semitic", "Chadic"],
        ["ar", "he", "am", "hau"],
        ["Middle East", "Africa"],
    ),
    "niger-congo": (
        "Niger-Congo",
        "The largest family in Africa, including Bantu and many West African languages",
        ["Bantu", "Volta-Niger"],
        ["sw", "yo", "zu"],
        ["Africa"],
    ),
    "austronesian": (
        "Austronesian",
        "Spoken across the islands of Southeast Asia and the Pacific",
        ["Malayo-Polynesian"],
        ["id", "ms"],
        ["Southeast Asia", "Oceania"],
    ),
    "japonic": ("Japonic", "Japanese and its close relatives", ["Japanese"], ["ja"], ["East Asia"]),
    "koreanic": ("Koreanic", "Korean and its dialects", ["Korean"], ["ko"], ["East Asia"]),
    "turkic": ("Turkic", "Spoken from Central Asia to Eastern Europe", ["Southwestern"], ["tr"], ["Asia", "Europe"]),
    "uralic": ("Uralic", "Finnic and Ugric languages of Northern and Eastern Europe",
               ["Finnic", "Ugric"], ["fi", "hu", "et"], ["Europe"]),
    "dravidian": ("Dravidian", "Languages of Southern India", ["Southern", "South-Central"],
                  ["ta", "te"], ["South Asia"]),
    "mongolic": ("Mongolic", "Mongolian and related languages", ["Mongolic"], ["mn"], ["Asia"]),
    "kra-dai": ("Kra-Dai", "Tai languages of mainland Southeast Asia", ["Tai"], ["th"], ["Southeast Asia"]),
    "austroasiatic": ("Austroasiatic", "Vietic and related languages of mainland Southeast Asia",
                      ["Vietic"], ["vi"], ["Southeast Asia"]),
}


def family_id(family_name: str) -> str:
    """'Indo-European' -> 'indo-european'; every non-letter becomes a dash."""
    return re.sub(r"[^a-z]", "-", family_name.lower())


def get_family_color(family: str) -> str:
    return FAMILY_COLORS.get(family, DEFAULT_FAMILY_COLOR)


def _build_family(identifier: str, languages: List[Language]) -> LanguageFamily:
    name, description, subfamilies, representatives, regions = LANGUAGE_FAMILIES[identifier]
    members = [language for language in languages if family_id(language.family) == identifier]
    average = sum(language.difficulty.overall for language in members) / len(members) if members else 0.0
    return LanguageFamily(
        id=identifier,
        name=name,
        description=description,
        subfamilies=list(subfamilies),
        representative_languages=list(representatives),
        regions=list(regions),
        color=get_family_color(identifier),
        language_count=len(members),
        average_difficulty=round(average, 1),
    )


def calculate_family_stats(store: DataStore) -> List[LanguageFamily]:
    """Every known family with its language count and average overall difficulty."""
    languages = get_all_languages(store)
    return [_build_family(identifier, languages) for identifier in LANGUAGE_FAMILIES]


def get_families_by_difficulty(store: DataStore) -> List[LanguageFamily]:
    """Families that have languages in the dataset, easiest first."""
    families = [family for family in calculate_family_stats(store) if family.language_count > 0]
    return sorted(families, key=lambda family: family.average_difficulty)


def get_languages_by_family(store: DataStore, identifier: str) -> List[Language]:
    """Languages of a known family; unknown family ids give an empty list."""
    if identifier not in LANGUAGE_FAMILIES:
        return []
    return [language for language in get_all_languages(store) if family_id(language.family) == identifier]


def get_family_detail(store: DataStore, identifier: str) -> Optional[LanguageFamilyDetail]:
    if identifier not in LANGUAGE_FAMILIES:
        return None
    languages = get_languages_by_family(store, identifier)
    family = _build_family(identifier, languages)
    return LanguageFamilyDetail(**family.model_dump(), languages=languages)
