"""
Culture info schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional


class CultureScores(BaseModel):
    """Four 1-5 scores describing practical and cultural value."""
    business_use: int = Field(..., ge=1, le=5)
    travel_value: int = Field(..., ge=1, le=5)
    cultural_richness: int = Field(..., ge=1, le=5)
    online_presence: int = Field(..., ge=1, le=5)


class CultureInfo(BaseModel):
    """Per-language cultural narrative."""
    overview: str
    business_use: str
    entertainment: List[str] = []
    cuisine: List[str] = []
    cultural_info: Optional[CultureScores] = None

    @field_validator('entertainment', 'cuisine', mode='before')
    @classmethod
    def coerce_to_list(cls, v):
        """Anything that is not a list becomes an empty list."""
        if not isinstance(v, list):
            return []
        return [str(item) for item in v]


class CultureInfoInput(BaseModel):
    """Loosely-typed culture payload accepted by the admin API."""
    overview: Optional[str] = None
    business_use: Optional[str] = None
    entertainment: Optional[object] = None
    cuisine: Optional[object] = None
    cultural_info: Optional[CultureScores] = None


class SaveCultureInfoRequest(BaseModel):
    """Request schema for saving one language's culture info."""
    language_id: Optional[str] = None
    culture_info: Optional[CultureInfoInput] = None


class CultureInfoResponse(BaseModel):
    language_id: str
    culture: CultureInfo
    has_custom_info: bool


class StoredCultureResponse(BaseModel):
    """Culture records as currently saved on disk: one record, or all of them when no id is given."""
    success: bool = True
    data: Optional[Dict[str, Any]] = None
    has_custom_info: Optional[bool] = None
    count: Optional[int] = None
