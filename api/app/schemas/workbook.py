"""
Spreadsheet row schemas.

Each row model mirrors one sheet of the import/export workbook. Values are
coerced leniently because spreadsheet cells arrive as str, int, float or None.
"""
from pydantic import BaseModel
from typing import List, Optional


class BasicInfoRow(BaseModel):
    """Row of the 'Basic Info' sheet."""
    id: str
    name: str
    native_name: str = ""
    countries: List[str] = []
    family: str = ""
    subfamily: str = ""
    writing_system: str = ""
    speakers: int = 0
    flag_emoji: str = ""
    color: str = ""


class FSIDetailRow(BaseModel):
    """Row of the 'FSI Details' sheet."""
    language_id: str
    language_name: str = ""
    fsi_category: Optional[int] = None
    study_hours: Optional[int] = None
    description: str = ""
    grammar_score: Optional[int] = None
    vocabulary_score: Optional[int] = None
    pronunciation_score: Optional[int] = None
    writing_score: Optional[int] = None
    cultural_score: Optional[int] = None
    overall_difficulty: Optional[int] = None
    grammar_difficulty: Optional[int] = None
    pronunciation_difficulty: Optional[int] = None
    vocabulary_difficulty: Optional[int] = None


class LearningResourceRow(BaseModel):
    """Row of the 'Learning Resources' sheet. A blank title marks a language with no resources."""
    language_id: str
    language_name: str = ""
    resource_title: str = ""
    resource_type: str = ""
    description: str = ""
    url: str = ""
    free: bool = False
    rating: Optional[int] = None


class CultureInfoRow(BaseModel):
    """Row of the 'Culture Info' sheet."""
    language_id: str
    language_name: str = ""
    cultural_overview: str = ""
    business_use: str = ""
    entertainment: List[str] = []
    cuisine: List[str] = []
    business_value: Optional[int] = None
    travel_value: Optional[int] = None
    cultural_richness: Optional[int] = None
    online_presence: Optional[int] = None


class ParsedWorkbook(BaseModel):
    """Typed rows per sheet plus every validation error found."""
    basic_info: List[BasicInfoRow] = []
    fsi_details: List[FSIDetailRow] = []
    learning_resources: List[LearningResourceRow] = []
    culture_info: List[CultureInfoRow] = []
    errors: List[str] = []

    @property
    def total_rows(self) -> int:
        return (
            len(self.basic_info)
            + len(self.fsi_details)
            + len(self.learning_resources)
            + len(self.culture_info)
        )


class ImportSummary(BaseModel):
    basic_info: int = 0
    fsi_details: int = 0
    learning_resources: int = 0
    culture_info: int = 0


class ImportResult(BaseModel):
    """Outcome of reading an uploaded workbook."""
    success: bool
    message: str
    data: Optional[ParsedWorkbook] = None
    errors: List[str] = []

    @property
    def summary(self) -> ImportSummary:
        if self.data is None:
            return ImportSummary()
        return ImportSummary(
            basic_info=len(self.data.basic_info),
            fsi_details=len(self.data.fsi_details),
            learning_resources=len(self.data.learning_resources),
            culture_info=len(self.data.culture_info),
        )
