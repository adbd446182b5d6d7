"""
Admin schemas: persistence outcomes, backups and batch saves.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from app.schemas.resource import LearningResource
from app.schemas.workbook import ImportSummary


class SaveOutcome(BaseModel):
    """Result object returned by every persistence operation."""
    success: bool
    message: str
    errors: List[str] = []
    backup_path: Optional[str] = None
    created: int = 0
    updated: int = 0
    skipped: int = 0


class BackupInfo(BaseModel):
    path: str
    timestamp: str
    description: str
    files: List[str] = []


class BackupListResponse(BaseModel):
    success: bool = True
    backups: List[BackupInfo]


class SaveDataRequest(BaseModel):
    """Batch of raw language records and resource lists from the admin editor."""
    languages: List[Dict[str, Any]]
    learning_resources: Optional[Dict[str, List[LearningResource]]] = None
    save_to_file: bool = False


class SaveDataResponse(BaseModel):
    success: bool
    message: str
    persistent: bool
    backup_path: Optional[str] = None
    languages_count: int = 0
    resources_count: int = 0


class RestoreBackupRequest(BaseModel):
    backup_path: str = Field(..., min_length=1)


class ImportResponse(BaseModel):
    """Response of the spreadsheet import endpoint."""
    success: bool
    message: str
    summary: ImportSummary
    outcomes: Dict[str, SaveOutcome] = {}
    reload_required: bool = True


class ReloadResponse(BaseModel):
    success: bool = True
    languages_count: int
    loaded_at: str


class DataQualityStats(BaseModel):
    total_languages: int = 0
    total_resources: int = 0
    languages_with_resources: int = 0
    languages_with_culture: int = 0
    fsi_distribution: Dict[int, int] = {}
    family_distribution: Dict[str, int] = {}


class DataQualityReport(BaseModel):
    """Consistency report over the stored dataset. Errors make it invalid, warnings do not."""
    valid: bool
    errors: List[str] = []
    warnings: List[str] = []
    stats: DataQualityStats
