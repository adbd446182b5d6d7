"""
Admin endpoint: spreadsheet import/export, saves, backups and reloads.

Saved changes are written to the data files immediately but only reach the
public endpoints after POST /admin/reload. Handlers are plain functions, which
FastAPI runs in its threadpool.
"""
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from app.core.config import settings
from app.core.data_store import CULTURE, LANGUAGES, DataStore, get_store
from app.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from app.schemas.admin import (
    BackupListResponse,
    DataQualityReport,
    ImportResponse,
    ReloadResponse,
    RestoreBackupRequest,
    SaveDataRequest,
    SaveDataResponse,
    SaveOutcome,
)
from app.schemas.culture import SaveCultureInfoRequest, StoredCultureResponse
from app.schemas.resource import SaveLearningResourcesRequest
from app.services import persistence_service, validation_service, workbook_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=workbook_service.XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )


def _raise_on_failure(outcome: SaveOutcome) -> SaveOutcome:
    if not outcome.success:
        raise PersistenceError(outcome.message, errors=outcome.errors)
    return outcome


@router.post("/import-excel", response_model=ImportResponse)
def import_excel(
    file: UploadFile = File(...),
    store: DataStore = Depends(get_store)
):
    """
    Import a four-sheet workbook and save every non-empty section.

    This endpoint:
    1. Checks the file extension and size
    2. Parses and validates all four sheets, collecting every row error
    3. Upserts languages, replaces resource lists and upserts culture records,
       backing up each data file before it is overwritten

    Returns:
        Row counts per sheet and the outcome of each save
    """
    filename = file.filename or ""
    extension = Path(filename).suffix.lower()
    if extension not in settings.allowed_upload_extensions:
        raise ValidationError(
            f"Please select an Excel file ({' or '.join(settings.allowed_upload_extensions)})"
        )

    content = file.file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise ValidationError(f"File size cannot exceed {settings.max_upload_size_mb}MB")

    result = workbook_service.import_workbook(content)
    if not result.success:
        raise ValidationError(result.message, errors=result.errors)

    outcomes = persistence_service.persist_import(store, result.data)
    failed = [name for name, outcome in outcomes.items() if not outcome.success]
    if failed:
        errors = [error for name in failed for error in outcomes[name].errors]
        raise PersistenceError(f"Import parsed but saving failed for: {', '.join(failed)}", errors=errors)

    logger.info(f"Imported {filename}: {result.summary.model_dump()}")
    return ImportResponse(
        success=True,
        message=result.message,
        summary=result.summary,
        outcomes=outcomes,
    )


@router.get("/export-excel")
def export_excel(store: DataStore = Depends(get_store)):
    """Download the current dataset as a four-sheet workbook."""
    workbook = workbook_service.serialize_workbook(store.snapshot())
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return _xlsx_response(workbook_service.workbook_to_bytes(workbook), f"languages-data-{today}.xlsx")


@router.get("/excel-template")
def excel_template():
    """Download an import template with one example row per sheet."""
    workbook = workbook_service.build_template_workbook()
    return _xlsx_response(workbook_service.workbook_to_bytes(workbook), "languages-template.xlsx")


@router.post("/save-data", response_model=SaveDataResponse)
def save_data(
    request: SaveDataRequest,
    store: DataStore = Depends(get_store)
):
    """Save a batch from the admin editor, to file when `save_to_file` is set."""
    if not request.languages:
        raise ValidationError("languages must be a non-empty list")
    id_counts = Counter(raw.get("id") for raw in request.languages if raw.get("id"))
    duplicates = sorted(language_id for language_id, count in id_counts.items() if count > 1)
    if duplicates:
        raise ConflictError("Duplicate language ids in batch", errors=duplicates)

    outcome = _raise_on_failure(persistence_service.save_dataset(
        store,
        request.languages,
        request.learning_resources,
        save_to_file=request.save_to_file,
    ))
    resources_count = sum(len(items) for items in (request.learning_resources or {}).values())
    return SaveDataResponse(
        success=True,
        message=outcome.message,
        persistent=request.save_to_file,
        backup_path=outcome.backup_path,
        languages_count=len(request.languages),
        resources_count=resources_count,
    )


@router.get("/save-data", response_model=BackupListResponse)
def list_backups(store: DataStore = Depends(get_store)):
    """List available backups, newest first."""
    return BackupListResponse(backups=persistence_service.list_backups(store))


@router.post("/save-learning-resources", response_model=SaveOutcome)
def save_learning_resources(
    request: SaveLearningResourcesRequest,
    store: DataStore = Depends(get_store)
):
    """Replace the resource list of one language."""
    known_ids = {raw.get("id") for raw in store.read_document(LANGUAGES)}
    if request.language_id not in known_ids:
        raise NotFoundError(f"Language '{request.language_id}' not found")
    return _raise_on_failure(
        persistence_service.save_language_resources(store, request.language_id, request.resources)
    )


@router.post("/save-culture-info", response_model=SaveOutcome)
def save_culture_info(
    request: SaveCultureInfoRequest,
    store: DataStore = Depends(get_store)
):
    """Save one language's culture info. Returns the backup path on success."""
    problems = persistence_service.culture_info_problems(request.language_id, request.culture_info)
    if problems:
        raise ValidationError("Missing required culture fields", errors=problems)

    return _raise_on_failure(
        persistence_service.save_culture_info(store, request.language_id, request.culture_info)
    )


@router.get("/culture-info", response_model=StoredCultureResponse)
def get_culture_info(
    language_id: Optional[str] = None,
    store: DataStore = Depends(get_store)
):
    """Get saved culture info straight from disk, for one language or all of them."""
    culture = store.read_document(CULTURE) if store.path_for(CULTURE).exists() else {}
    if language_id:
        record = culture.get(language_id)
        return StoredCultureResponse(data=record, has_custom_info=record is not None)
    return StoredCultureResponse(data=culture, count=len(culture))


@router.post("/restore-backup", response_model=SaveOutcome)
def restore_backup(
    request: RestoreBackupRequest,
    store: DataStore = Depends(get_store)
):
    """Restore the data files from a backup set or a single-file backup."""
    outcome = persistence_service.restore_backup(store, request.backup_path)
    if not outcome.success:
        raise ValidationError(outcome.message, errors=outcome.errors)
    return outcome


@router.post("/reload", response_model=ReloadResponse)
def reload_data(store: DataStore = Depends(get_store)):
    """Reload the dataset from disk so saved changes become visible."""
    snapshot = store.reload()
    return ReloadResponse(
        languages_count=len(snapshot.languages),
        loaded_at=snapshot.loaded_at.isoformat(),
    )


@router.get("/data-quality", response_model=DataQualityReport)
def data_quality(store: DataStore = Depends(get_store)):
    """Check the loaded dataset for duplicates, missing fields and inconsistent values."""
    return validation_service.validate_dataset(store.snapshot())
