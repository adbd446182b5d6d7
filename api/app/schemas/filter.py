"""
Filter configuration schema for language browsing and search.
"""
from pydantic import BaseModel
from typing import List, Optional

from app.models.enums import LanguageSortBy
from app.schemas.language import Language


class LanguageFilter(BaseModel):
    """Filter configuration for language listings.

    Empty lists and None bounds mean "no filter" for that dimension.
    """
    fsi_categories: List[int] = []
    families: List[str] = []
    regions: List[str] = []  # A language matches when any of its regions is listed
    search: Optional[str] = None
    difficulty_min: Optional[int] = None
    difficulty_max: Optional[int] = None
    hours_min: Optional[int] = None
    hours_max: Optional[int] = None
    speakers_min: Optional[int] = None
    speakers_max: Optional[int] = None
    sort_by: LanguageSortBy = LanguageSortBy.NAME

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "fsi_categories": [1, 2],
                "families": ["Indo-European"],
                "regions": ["Spain"],
                "search": "span",
                "hours_max": 1100,
                "sort_by": "hours-asc"
            }
        }


class SearchResult(BaseModel):
    language: Language
    score: float
    matched_fields: List[str]


class FilterOptions(BaseModel):
    """Values available for filtering and the bounds of the numeric ranges."""
    fsi_categories: List[int]
    families: List[str]
    regions: List[str]
    difficulty_bounds: List[int]
    hours_bounds: List[int]
    speakers_bounds: List[int]
