"""
Language schemas.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Tuple

from app.models.enums import ResourceType
from app.schemas.culture import CultureInfo, CultureScores
from app.schemas.resource import LearningResource


class FSIDetails(BaseModel):
    """Five difficulty sub-scores, each typically 1-5."""
    grammar: int
    vocabulary: int
    pronunciation: int
    writing: int
    cultural: int


class FSIInfo(BaseModel):
    """FSI category, study hours and difficulty breakdown."""
    category: int = Field(..., ge=0, le=5)  # 0 = reference/native language
    hours: int
    description: str
    details: FSIDetails
    hours_range: Optional[Tuple[int, int]] = None


class LanguageDifficulty(BaseModel):
    """Coarse difficulty scores tracked separately from the FSI details."""
    overall: int
    grammar: int
    pronunciation: int
    vocabulary: int


class Language(BaseModel):
    """Canonical language record."""
    id: str
    name: str
    native_name: str
    regions: List[str]
    family: str
    subfamily: str
    writing_system: str
    speakers: int
    flag_emoji: str
    color: str
    fsi: FSIInfo
    difficulty: LanguageDifficulty

    class Config:
        from_attributes = True


class LanguagesResponse(BaseModel):
    """List of languages response schema."""
    languages: List[Language]
    total: int


class SpeakerStats(BaseModel):
    """Formatted speaker counts and the global rank bucket."""
    total: str  # e.g. "548M"
    native: str
    total_count: int
    native_count: int
    rank: int


class Geography(BaseModel):
    primary_countries: List[str]
    secondary_countries: List[str]
    continents: List[str]


class ExtendedLanguageDetail(Language):
    """Request-time composition of a language with its resources and culture."""
    speaker_stats: SpeakerStats
    geography: Geography
    learning_resources: Dict[ResourceType, List[LearningResource]]
    culture: CultureInfo
    has_custom_culture: bool
    cultural_info: CultureScores


class CompareLanguagesResponse(BaseModel):
    """Side-by-side comparison of the requested languages."""
    languages: List[Language]
    not_found: List[str]
