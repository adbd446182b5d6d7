"""
Learning resource schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from app.models.enums import ResourceType


class LearningResource(BaseModel):
    """One recommended resource for learning a language."""
    title: str
    type: ResourceType
    description: str = ""
    free: bool = False
    url: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate title field is not empty."""
        if not v or not v.strip():
            raise ValueError("title cannot be missing or empty")
        return v.strip()

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        """Accept resource types in any case ('App', 'BOOK', ...)."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('url', mode='before')
    @classmethod
    def blank_url_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LearningResourcesResponse(BaseModel):
    language_id: str
    resources: List[LearningResource]


class SaveLearningResourcesRequest(BaseModel):
    """Request schema for replacing one language's resource list."""
    language_id: str = Field(..., min_length=1)
    resources: List[LearningResource]
