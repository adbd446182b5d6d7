"""
Persistence service for writing admin changes back to the data files.

Every save follows the same sequence while holding the store's write lock:
read the current file fresh from disk, apply the change to that copy, write a
timestamped backup of the previous file content, then atomically replace the
live file. The main write only happens once the backup is on disk.

Saved changes are not visible to readers until the store is reloaded.
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.data_store import CULTURE, DOCUMENTS, FORMAT_VERSION, LANGUAGES, LEARNING_RESOURCES, DataStore
from app.core.exceptions import PersistenceError
from app.schemas.admin import BackupInfo, SaveOutcome
from app.schemas.culture import CultureInfo, CultureInfoInput, CultureScores
from app.schemas.language import FSIDetails, FSIInfo, Language, LanguageDifficulty
from app.schemas.resource import LearningResource
from app.schemas.workbook import BasicInfoRow, CultureInfoRow, FSIDetailRow, LearningResourceRow, ParsedWorkbook
from app.services.field_rules import (
    FALLBACK_CATEGORY,
    clamp_category,
    default_color,
    default_description,
    default_difficulty,
    default_fsi_details,
    default_hours,
)
from app.services.language_service import (
    DEFAULT_FLAG,
    DEFAULT_WRITING_SYSTEM,
    adapt_language_data,
    language_to_record,
)
from app.utils.file_utils import atomic_write_text, backup_timestamp, is_within_directory

logger = logging.getLogger(__name__)

BACKUP_INFO_FILE = "backup-info.json"
DATASET_SNAPSHOT_PREFIX = "dataset-snapshot"
TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z")


# ============================================================================
# Backup helpers
# ============================================================================

def _document_stem(name: str) -> str:
    return Path(DOCUMENTS[name][0]).stem


def _unique_path(path: Path) -> Path:
    """Append a counter when two backups land on the same millisecond."""
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def write_file_backup(store: DataStore, name: str, content: str) -> Path:
    """
    Write the previous content of a data file to the backups directory.

    Args:
        store: Data store owning the file
        name: Document name (languages, learning_resources, culture)
        content: File content to preserve

    Returns:
        Path of the backup file

    Raises:
        PersistenceError: If the backup cannot be written
    """
    path = _unique_path(store.backups_dir / f"{_document_stem(name)}-{backup_timestamp()}.json")
    try:
        atomic_write_text(path, content)
    except OSError as exc:
        raise PersistenceError(f"Cannot write backup {path}: {exc}") from exc
    logger.info(f"Created backup: {path}")
    return path


def write_dataset_snapshot(store: DataStore, culture: Mapping[str, Any]) -> Path:
    """Write all three documents, as they are before an update, into one JSON file."""
    path = _unique_path(store.backups_dir / f"{DATASET_SNAPSHOT_PREFIX}-{backup_timestamp()}.json")
    languages = store.read_document(LANGUAGES)
    resources = store.read_document(LEARNING_RESOURCES) if store.path_for(LEARNING_RESOURCES).exists() else {}
    document = {
        "version": FORMAT_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "languages": languages,
        "resources": resources,
        "culture": dict(culture),
    }
    try:
        atomic_write_text(path, json.dumps(document, ensure_ascii=False, indent=2) + "\n")
    except OSError as exc:
        raise PersistenceError(f"Cannot write dataset snapshot {path}: {exc}") from exc
    logger.info(f"Created dataset snapshot: {path}")
    return path


def create_backup_set(store: DataStore, description: str = "Automatic backup before admin data change") -> Path:
    """
    Copy every existing data file into a new timestamped backup directory.

    The directory also holds a backup-info.json with the timestamp, file list
    and description.

    Raises:
        PersistenceError: If any file cannot be read or written
    """
    moment = datetime.now(timezone.utc)
    backup_dir = _unique_path(store.backups_dir / backup_timestamp(moment))
    files = []
    try:
        backup_dir.mkdir(parents=True)
        for name in DOCUMENTS:
            source = store.path_for(name)
            if not source.exists():
                continue
            atomic_write_text(backup_dir / source.name, store.read_text(name))
            files.append(source.name)

        info = {
            "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "files": files,
            "description": description,
        }
        atomic_write_text(backup_dir / BACKUP_INFO_FILE, json.dumps(info, ensure_ascii=False, indent=2) + "\n")
    except OSError as exc:
        raise PersistenceError(f"Cannot create backup set {backup_dir}: {exc}") from exc

    logger.info(f"Created full backup: {backup_dir} ({len(files)} files)")
    return backup_dir


def _failure(message: str, exc: Exception) -> SaveOutcome:
    logger.error(f"{message}: {exc}")
    return SaveOutcome(success=False, message=message, errors=[str(exc)])


# ============================================================================
# Languages
# ============================================================================

def _score(value: Optional[int], default: int) -> int:
    return value if value is not None else default


def build_language_from_rows(basic_row: BasicInfoRow, fsi_row: Optional[FSIDetailRow] = None) -> Dict[str, Any]:
    """
    Build a canonical language record from spreadsheet rows.

    Without a matching FSI row, the FSI fields default to category 3.
    Blank detail or difficulty cells fall back to the category defaults.
    """
    if fsi_row is not None and fsi_row.fsi_category is not None:
        category = clamp_category(fsi_row.fsi_category)
    else:
        category = FALLBACK_CATEGORY

    defaults = default_fsi_details(category)
    if fsi_row is not None:
        details = FSIDetails(
            grammar=_score(fsi_row.grammar_score, defaults.grammar),
            vocabulary=_score(fsi_row.vocabulary_score, defaults.vocabulary),
            pronunciation=_score(fsi_row.pronunciation_score, defaults.pronunciation),
            writing=_score(fsi_row.writing_score, defaults.writing),
            cultural=_score(fsi_row.cultural_score, defaults.cultural),
        )
        hours = fsi_row.study_hours if fsi_row.study_hours is not None else default_hours(category)
        description = fsi_row.description or default_description(category)
    else:
        details = defaults
        hours = default_hours(category)
        description = default_description(category)

    difficulty = default_difficulty(category, details)
    if fsi_row is not None:
        difficulty = LanguageDifficulty(
            overall=_score(fsi_row.overall_difficulty, difficulty.overall),
            grammar=_score(fsi_row.grammar_difficulty, difficulty.grammar),
            pronunciation=_score(fsi_row.pronunciation_difficulty, difficulty.pronunciation),
            vocabulary=_score(fsi_row.vocabulary_difficulty, difficulty.vocabulary),
        )

    language = Language(
        id=basic_row.id,
        name=basic_row.name,
        native_name=basic_row.native_name or basic_row.name,
        regions=list(basic_row.countries),
        family=basic_row.family,
        subfamily=basic_row.subfamily or basic_row.family,
        writing_system=basic_row.writing_system or DEFAULT_WRITING_SYSTEM,
        speakers=basic_row.speakers,
        flag_emoji=basic_row.flag_emoji or DEFAULT_FLAG,
        color=basic_row.color or default_color(category),
        fsi=FSIInfo(category=category, hours=hours, description=description, details=details),
        difficulty=difficulty,
    )
    return language_to_record(language)


def _basic_row_from_language(language: Language) -> BasicInfoRow:
    """Basic Info row of a stored language, for FSI-only updates."""
    return BasicInfoRow(
        id=language.id,
        name=language.name,
        native_name=language.native_name,
        countries=list(language.regions),
        family=language.family,
        subfamily=language.subfamily,
        writing_system=language.writing_system,
        speakers=language.speakers,
        flag_emoji=language.flag_emoji,
        color=language.color,
    )


def save_languages(
    store: DataStore,
    basic_rows: List[BasicInfoRow],
    fsi_rows: List[FSIDetailRow],
) -> SaveOutcome:
    """
    Upsert languages from Basic Info rows, matched to FSI rows by language id.

    Existing ids are replaced in place, new ids are appended. An FSI row
    without a Basic Info row updates the FSI fields of a stored language and
    keeps its other fields; for an unknown id it is skipped and reported.
    """
    fsi_by_id = {row.language_id: row for row in fsi_rows if row.language_id}
    basic_ids = {row.id for row in basic_rows if row.id}

    with store.write_lock:
        try:
            previous = store.read_text(LANGUAGES)
            languages = store.parse_document(LANGUAGES, previous)
            index_by_id = {raw.get("id"): position for position, raw in enumerate(languages)}

            created = updated = skipped = 0
            errors = []
            for basic_row in basic_rows:
                if not basic_row.id:
                    skipped += 1
                    continue
                record = build_language_from_rows(basic_row, fsi_by_id.get(basic_row.id))
                if basic_row.id in index_by_id:
                    languages[index_by_id[basic_row.id]] = record
                    updated += 1
                else:
                    index_by_id[basic_row.id] = len(languages)
                    languages.append(record)
                    created += 1

            for row_number, fsi_row in enumerate(fsi_rows, start=1):
                if not fsi_row.language_id or fsi_row.language_id in basic_ids:
                    continue
                if fsi_row.language_id not in index_by_id:
                    skipped += 1
                    errors.append(f"FSI Details row {row_number}: unknown language id {fsi_row.language_id}")
                    continue
                position = index_by_id[fsi_row.language_id]
                stored = adapt_language_data(languages[position])
                languages[position] = build_language_from_rows(_basic_row_from_language(stored), fsi_row)
                updated += 1

            backup_path = write_file_backup(store, LANGUAGES, previous)
            store.write_document(LANGUAGES, languages)
        except PersistenceError as exc:
            return _failure("Failed to save languages", exc)

    logger.info(f"Saved languages: {created} created, {updated} updated, {skipped} skipped")
    for error in errors:
        logger.warning(error)
    return SaveOutcome(
        success=True,
        message=f"Saved {created + updated} languages ({created} new, {updated} updated)",
        errors=errors,
        backup_path=str(backup_path),
        created=created,
        updated=updated,
        skipped=skipped,
    )


# ============================================================================
# Learning resources
# ============================================================================

def _replace_resources(store: DataStore, grouped: Mapping[str, List[Dict[str, Any]]]) -> SaveOutcome:
    """Replace the resource list of every language in `grouped`; others stay untouched."""
    with store.write_lock:
        try:
            if store.path_for(LEARNING_RESOURCES).exists():
                previous = store.read_text(LEARNING_RESOURCES)
                resources = store.parse_document(LEARNING_RESOURCES, previous)
            else:
                previous = None
                resources = {}

            created = updated = 0
            for language_id, items in grouped.items():
                if language_id in resources:
                    updated += 1
                else:
                    created += 1
                resources[language_id] = items

            ordered = {language_id: resources[language_id] for language_id in sorted(resources)}
            backup_path = write_file_backup(store, LEARNING_RESOURCES, previous) if previous is not None else None
            store.write_document(LEARNING_RESOURCES, ordered)
        except PersistenceError as exc:
            return _failure("Failed to save learning resources", exc)

    logger.info(f"Saved learning resources for {len(grouped)} languages")
    return SaveOutcome(
        success=True,
        message=f"Saved learning resources for {len(grouped)} languages",
        backup_path=str(backup_path) if backup_path else None,
        created=created,
        updated=updated,
    )


def _resource_record(resource: LearningResource) -> Dict[str, Any]:
    return resource.model_dump(mode="json", exclude_none=True)


def save_learning_resources(store: DataStore, rows: List[LearningResourceRow]) -> SaveOutcome:
    """
    Save imported Learning Resources rows.

    Rows are grouped by language id and each group replaces that language's list.
    A row with a blank title only registers the language (with an empty list).
    """
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    errors = []
    skipped = 0

    for index, row in enumerate(rows, start=1):
        if not row.language_id:
            skipped += 1
            continue
        items = grouped.setdefault(row.language_id, [])
        if not row.resource_title:
            continue
        try:
            resource = LearningResource(
                title=row.resource_title,
                type=row.resource_type,
                description=row.description,
                free=row.free,
                url=row.url or None,
                rating=row.rating,
            )
        except PydanticValidationError as exc:
            skipped += 1
            errors.append(f"Learning Resources row {index}: {exc.errors()[0]['msg']}")
            continue
        items.append(_resource_record(resource))

    outcome = _replace_resources(store, grouped)
    outcome.skipped = skipped
    outcome.errors = outcome.errors + errors
    return outcome


def save_language_resources(store: DataStore, language_id: str, resources: List[LearningResource]) -> SaveOutcome:
    """Replace one language's resource list."""
    return _replace_resources(store, {language_id: [_resource_record(resource) for resource in resources]})


# ============================================================================
# Culture info
# ============================================================================

def culture_info_problems(language_id: Optional[str], culture_info: Optional[CultureInfoInput]) -> List[str]:
    """Required-field problems of a culture save request; empty when valid."""
    problems = []
    if not language_id or not language_id.strip():
        problems.append("language_id is required")
    if culture_info is None:
        problems.append("culture_info is required")
        return problems
    if not culture_info.overview or not culture_info.overview.strip():
        problems.append("culture_info.overview is required")
    if not culture_info.business_use or not culture_info.business_use.strip():
        problems.append("culture_info.business_use is required")
    return problems


def _as_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _read_culture(store: DataStore) -> tuple:
    """Current culture map and its file content (None when the file does not exist yet)."""
    if not store.path_for(CULTURE).exists():
        return {}, None
    previous = store.read_text(CULTURE)
    return store.parse_document(CULTURE, previous), previous


def save_culture_info(
    store: DataStore,
    language_id: Optional[str],
    culture_info: Optional[Union[CultureInfoInput, Mapping[str, Any]]],
) -> SaveOutcome:
    """
    Upsert one language's culture record.

    Besides the file-level backup, a snapshot of the whole dataset as it was
    before the update is written to the backups directory.

    Returns:
        SaveOutcome whose backup_path points at the file-level backup when one
        was needed, otherwise at the dataset snapshot
    """
    if isinstance(culture_info, Mapping):
        try:
            culture_info = CultureInfoInput.model_validate(dict(culture_info))
        except PydanticValidationError as exc:
            return SaveOutcome(success=False, message="Invalid culture info", errors=[str(exc)])

    problems = culture_info_problems(language_id, culture_info)
    if problems:
        return SaveOutcome(success=False, message="Missing required culture fields", errors=problems)

    language_id = language_id.strip()
    record = CultureInfo(
        overview=culture_info.overview.strip(),
        business_use=culture_info.business_use.strip(),
        entertainment=_as_list(culture_info.entertainment),
        cuisine=_as_list(culture_info.cuisine),
        cultural_info=culture_info.cultural_info,
    ).model_dump(mode="json", exclude_none=True)

    with store.write_lock:
        try:
            culture, previous = _read_culture(store)
            snapshot_path = write_dataset_snapshot(store, culture)
            backup_path = write_file_backup(store, CULTURE, previous) if previous is not None else None

            existed = language_id in culture
            culture[language_id] = record
            store.write_document(CULTURE, {key: culture[key] for key in sorted(culture)})
        except PersistenceError as exc:
            return _failure(f"Failed to save culture info for {language_id}", exc)

    logger.info(f"Saved culture info for {language_id}")
    return SaveOutcome(
        success=True,
        message=f"Culture info for {language_id} saved",
        backup_path=str(backup_path or snapshot_path),
        created=0 if existed else 1,
        updated=1 if existed else 0,
    )


def _culture_scores_from_row(row: CultureInfoRow) -> Optional[CultureScores]:
    values = (row.business_value, row.travel_value, row.cultural_richness, row.online_presence)
    if any(value is None for value in values):
        return None
    try:
        return CultureScores(
            business_use=row.business_value,
            travel_value=row.travel_value,
            cultural_richness=row.cultural_richness,
            online_presence=row.online_presence,
        )
    except PydanticValidationError:
        return None


def save_culture_rows(store: DataStore, rows: List[CultureInfoRow]) -> SaveOutcome:
    """Upsert imported Culture Info rows; rows without overview or business use are skipped."""
    records: Dict[str, Dict[str, Any]] = {}
    errors = []
    skipped = 0
    for index, row in enumerate(rows, start=1):
        if not row.language_id or not row.cultural_overview or not row.business_use:
            skipped += 1
            errors.append(f"Culture Info row {index}: overview and business use are required, row skipped")
            continue
        records[row.language_id] = CultureInfo(
            overview=row.cultural_overview,
            business_use=row.business_use,
            entertainment=list(row.entertainment),
            cuisine=list(row.cuisine),
            cultural_info=_culture_scores_from_row(row),
        ).model_dump(mode="json", exclude_none=True)

    if not records:
        return SaveOutcome(success=True, message="No culture rows to save", errors=errors, skipped=skipped)

    with store.write_lock:
        try:
            culture, previous = _read_culture(store)
            backup_path = (
                write_file_backup(store, CULTURE, previous) if previous is not None
                else write_dataset_snapshot(store, culture)
            )
            created = sum(1 for language_id in records if language_id not in culture)
            culture.update(records)
            store.write_document(CULTURE, {key: culture[key] for key in sorted(culture)})
        except PersistenceError as exc:
            return _failure("Failed to save culture info", exc)

    logger.info(f"Saved culture info for {len(records)} languages ({skipped} rows skipped)")
    return SaveOutcome(
        success=True,
        message=f"Saved culture info for {len(records)} languages",
        errors=errors,
        backup_path=str(backup_path),
        created=created,
        updated=len(records) - created,
        skipped=skipped,
    )


# ============================================================================
# Whole dataset
# ============================================================================

def roll_back_documents(store: DataStore, backup_dir: Path, names: List[str]) -> None:
    """
    Put documents back to their state in a backup set.

    A document absent from the set did not exist before, so it is removed.
    """
    for name in names:
        live = store.path_for(name)
        saved = backup_dir / live.name
        try:
            if saved.exists():
                atomic_write_text(live, saved.read_text(encoding="utf-8"))
            elif live.exists():
                live.unlink()
        except OSError as exc:
            logger.error(f"Could not roll back {live.name} from {backup_dir}: {exc}")
            continue
        logger.warning(f"Rolled back {live.name} from {backup_dir}")


def save_dataset(
    store: DataStore,
    languages: List[Mapping[str, Any]],
    resources: Optional[Mapping[str, List[LearningResource]]] = None,
    save_to_file: bool = False,
) -> SaveOutcome:
    """
    Save a full batch from the admin editor.

    With `save_to_file` False the batch is only acknowledged. Otherwise a full
    backup set is created first and the language list (and resources, when
    given) replace the current files. When a write fails, the files already
    written are restored from that backup set.
    """
    records = [language_to_record(adapt_language_data(raw)) for raw in languages]

    if not save_to_file:
        logger.info(f"Received {len(records)} languages (memory only)")
        return SaveOutcome(
            success=True,
            message=f"Received {len(records)} languages (not persisted to file)",
            updated=len(records),
        )

    payloads = {LANGUAGES: records}
    if resources is not None:
        payloads[LEARNING_RESOURCES] = {
            language_id: [_resource_record(resource) for resource in resources[language_id]]
            for language_id in sorted(resources)
        }

    with store.write_lock:
        try:
            backup_dir = create_backup_set(store, "Automatic backup before saving admin changes")
        except PersistenceError as exc:
            return _failure("Failed to save data to file", exc)

        written = []
        try:
            for name, payload in payloads.items():
                written.append(name)
                store.write_document(name, payload)
        except PersistenceError as exc:
            roll_back_documents(store, backup_dir, written)
            return _failure("Failed to save data to file", exc)

    logger.info(f"Saved {len(records)} languages to file")
    return SaveOutcome(
        success=True,
        message=f"Saved {len(records)} languages to file",
        backup_path=str(backup_dir),
        updated=len(records),
    )


# ============================================================================
# Backups
# ============================================================================

def _timestamp_in(name: str) -> str:
    match = TIMESTAMP_PATTERN.search(name)
    return match.group(0) if match else ""


def _document_for_backup_file(path: Path) -> Optional[str]:
    for name in DOCUMENTS:
        if path.name.startswith(f"{_document_stem(name)}-") and path.suffix == ".json":
            return name
    return None


def _backup_set_info(directory: Path) -> Optional[BackupInfo]:
    info_path = directory / BACKUP_INFO_FILE
    if not info_path.exists():
        return None
    try:
        info = json.loads(info_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Skipping unreadable backup info {info_path}: {exc}")
        return None
    return BackupInfo(
        path=str(directory),
        timestamp=str(info.get("timestamp", directory.name)),
        description=str(info.get("description", "")),
        files=[str(name) for name in info.get("files", [])],
    )


def list_backups(store: DataStore) -> List[BackupInfo]:
    """Backup sets and single-file backups, newest first."""
    if not store.backups_dir.exists():
        return []

    entries = []
    for entry in store.backups_dir.iterdir():
        if entry.is_dir():
            info = _backup_set_info(entry)
        elif _document_for_backup_file(entry) is not None:
            info = BackupInfo(
                path=str(entry),
                timestamp=_timestamp_in(entry.name),
                description=f"Backup of {DOCUMENTS[_document_for_backup_file(entry)][0]}",
                files=[DOCUMENTS[_document_for_backup_file(entry)][0]],
            )
        else:
            continue
        if info is not None:
            entries.append((_timestamp_in(entry.name), entry.name, info))

    entries.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [info for _, _, info in entries]


def _restore_targets(path: Path) -> Dict[str, Path]:
    """Map document names to the backup files that restore them."""
    if path.is_dir():
        return {
            name: path / DOCUMENTS[name][0]
            for name in DOCUMENTS
            if (path / DOCUMENTS[name][0]).exists()
        }
    name = _document_for_backup_file(path)
    return {name: path} if name else {}


def restore_backup(store: DataStore, backup_path: str) -> SaveOutcome:
    """
    Restore the live data files from a backup set or a single-file backup.

    The path must live inside the backups directory. Current files are backed
    up as a new set before they are replaced.
    """
    path = Path(backup_path)
    if not path.is_absolute():
        path = store.backups_dir / path

    if not is_within_directory(path, store.backups_dir):
        return SaveOutcome(success=False, message="Backup path must be inside the backups directory",
                           errors=[backup_path])
    if not path.exists():
        return SaveOutcome(success=False, message="Backup not found", errors=[backup_path])

    targets = _restore_targets(path)
    if not targets:
        return SaveOutcome(success=False, message="Nothing to restore from this backup", errors=[backup_path])

    with store.write_lock:
        try:
            contents = {}
            for name, source in targets.items():
                try:
                    text = source.read_text(encoding="utf-8")
                except OSError as exc:
                    raise PersistenceError(f"Cannot read backup {source}: {exc}") from exc
                # Refuse to restore anything that would not load
                store.parse_document(name, text)
                contents[name] = text

            safety_dir = create_backup_set(store, f"Automatic backup before restoring {path.name}")
            for name, text in contents.items():
                try:
                    atomic_write_text(store.path_for(name), text)
                except OSError as exc:
                    raise PersistenceError(f"Cannot restore {store.path_for(name)}: {exc}") from exc
        except PersistenceError as exc:
            return _failure("Failed to restore backup", exc)

    restored = sorted(DOCUMENTS[name][0] for name in contents)
    logger.info(f"Restored {', '.join(restored)} from {path}")
    return SaveOutcome(
        success=True,
        message=f"Restored {', '.join(restored)} from backup",
        backup_path=str(safety_dir),
        updated=len(contents),
    )


# ============================================================================
# Import
# ============================================================================

def persist_import(store: DataStore, parsed: ParsedWorkbook) -> Dict[str, SaveOutcome]:
    """
    Apply each non-empty section of an imported workbook.

    Returns:
        Outcome per applied section, keyed languages / learning_resources / culture
    """
    outcomes: Dict[str, SaveOutcome] = {}
    if parsed.basic_info or parsed.fsi_details:
        outcomes[LANGUAGES] = save_languages(store, parsed.basic_info, parsed.fsi_details)
    if parsed.learning_resources:
        outcomes[LEARNING_RESOURCES] = save_learning_resources(store, parsed.learning_resources)
    if parsed.culture_info:
        outcomes[CULTURE] = save_culture_rows(store, parsed.culture_info)
    return outcomes

