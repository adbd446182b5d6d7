"""
Language family and country schemas.
"""
from pydantic import BaseModel
from typing import List

from app.schemas.language import Language


class LanguageFamily(BaseModel):
    """Family reference data with statistics computed from the dataset."""
    id: str  # e.g. "indo-european"
    name: str
    description: str
    subfamilies: List[str]
    representative_languages: List[str]
    regions: List[str]
    color: str
    language_count: int = 0
    average_difficulty: float = 0.0


class LanguageFamiliesResponse(BaseModel):
    families: List[LanguageFamily]
    total: int


class LanguageFamilyDetail(LanguageFamily):
    languages: List[Language]


class CountryLanguageInfo(BaseModel):
    """Languages of one country, primary first."""
    country: str
    primary: str
    secondary: List[str]
    region: str
    difficulty_avg: float
    color: str
    languages: List[Language]
