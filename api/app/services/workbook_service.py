"""
Workbook service for exporting the dataset to, and importing it from, a
four-sheet Excel workbook.
"""
import logging
from io import BytesIO
from typing import Any, Dict, List, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from pydantic import ValidationError as PydanticValidationError

from app.core.data_store import DatasetSnapshot
from app.core.exceptions import WorkbookFormatError
from app.schemas.culture import CultureInfo
from app.schemas.resource import LearningResource
from app.schemas.workbook import (
    BasicInfoRow,
    CultureInfoRow,
    FSIDetailRow,
    ImportResult,
    LearningResourceRow,
    ParsedWorkbook,
)
from app.services.field_rules import default_culture_info, synthesize_culture_scores
from app.services.language_service import adapt_language_data
from app.utils.text_utils import cell_text, is_blank, join_list, parse_optional_int, parse_yes_no, split_list

logger = logging.getLogger(__name__)

BASIC_INFO_SHEET = "Basic Info"
FSI_DETAILS_SHEET = "FSI Details"
LEARNING_RESOURCES_SHEET = "Learning Resources"
CULTURE_INFO_SHEET = "Culture Info"

BASIC_INFO_HEADERS = [
    "ID", "Name", "Native Name", "Countries", "Family", "Subfamily",
    "Writing System", "Speakers", "Flag Emoji", "Color",
]
FSI_DETAILS_HEADERS = [
    "Language ID", "Language Name", "FSI Category", "Study Hours", "Description",
    "Grammar Score", "Vocabulary Score", "Pronunciation Score", "Writing Score", "Cultural Score",
    "Overall Difficulty", "Grammar Difficulty", "Pronunciation Difficulty", "Vocabulary Difficulty",
]
LEARNING_RESOURCES_HEADERS = [
    "Language ID", "Language Name", "Resource Title", "Resource Type",
    "Description", "URL", "Free", "Rating",
]
CULTURE_INFO_HEADERS = [
    "Language ID", "Language Name", "Cultural Overview", "Business Use", "Entertainment", "Cuisine",
    "Business Value", "Travel Value", "Cultural Richness", "Online Presence",
]

# Sheet order in exported workbooks
SHEETS: List[Tuple[str, List[str]]] = [
    (BASIC_INFO_SHEET, BASIC_INFO_HEADERS),
    (FSI_DETAILS_SHEET, FSI_DETAILS_HEADERS),
    (LEARNING_RESOURCES_SHEET, LEARNING_RESOURCES_HEADERS),
    (CULTURE_INFO_SHEET, CULTURE_INFO_HEADERS),
]

FORMAT_ERROR_MESSAGE = "File format error or corrupted file"
NO_DATA_MESSAGE = "No data found in the Excel file. Make sure at least one sheet contains data"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell(value: Any) -> Any:
    """Missing values are exported as empty strings."""
    return "" if value is None else value


# ============================================================================
# Export
# ============================================================================

def _culture_for(snapshot: DatasetSnapshot, language_id: str, name: str) -> CultureInfo:
    raw = snapshot.culture.get(language_id)
    if raw is not None:
        try:
            return CultureInfo.model_validate(raw)
        except PydanticValidationError:
            logger.warning(f"Exporting default culture for {language_id}: stored record is malformed")
    return default_culture_info(language_id, name)


def _resources_for(snapshot: DatasetSnapshot, language_id: str) -> List[LearningResource]:
    resources = []
    for raw in snapshot.resources.get(language_id, []):
        try:
            resources.append(LearningResource.model_validate(raw))
        except PydanticValidationError:
            logger.warning(f"Skipping malformed resource for {language_id} during export")
    return resources


def build_export_rows(snapshot: DatasetSnapshot) -> Dict[str, List[Dict[str, Any]]]:
    """
    Flatten the dataset into header-keyed rows for each sheet.

    Args:
        snapshot: Dataset to export

    Returns:
        Mapping of sheet name to its rows
    """
    basic_info = []
    fsi_details = []
    learning_resources = []
    culture_info = []

    for raw in snapshot.languages:
        language = adapt_language_data(raw)

        basic_info.append({
            "ID": language.id,
            "Name": language.name,
            "Native Name": language.native_name,
            "Countries": join_list(language.regions),
            "Family": language.family,
            "Subfamily": language.subfamily,
            "Writing System": language.writing_system,
            "Speakers": language.speakers,
            "Flag Emoji": language.flag_emoji,
            "Color": language.color,
        })

        details = language.fsi.details
        difficulty = language.difficulty
        fsi_details.append({
            "Language ID": language.id,
            "Language Name": language.name,
            "FSI Category": language.fsi.category,
            "Study Hours": language.fsi.hours,
            "Description": _cell(language.fsi.description),
            "Grammar Score": _cell(details.grammar if details else None),
            "Vocabulary Score": _cell(details.vocabulary if details else None),
            "Pronunciation Score": _cell(details.pronunciation if details else None),
            "Writing Score": _cell(details.writing if details else None),
            "Cultural Score": _cell(details.cultural if details else None),
            "Overall Difficulty": _cell(difficulty.overall if difficulty else None),
            "Grammar Difficulty": _cell(difficulty.grammar if difficulty else None),
            "Pronunciation Difficulty": _cell(difficulty.pronunciation if difficulty else None),
            "Vocabulary Difficulty": _cell(difficulty.vocabulary if difficulty else None),
        })

        resources = _resources_for(snapshot, language.id)
        for resource in resources:
            learning_resources.append({
                "Language ID": language.id,
                "Language Name": language.name,
                "Resource Title": resource.title,
                "Resource Type": resource.type.value,
                "Description": resource.description,
                "URL": _cell(resource.url),
                "Free": "Yes" if resource.free else "No",
                "Rating": _cell(resource.rating),
            })
        if not resources:
            # Keep the language visible in the sheet
            learning_resources.append({
                "Language ID": language.id,
                "Language Name": language.name,
                "Resource Title": "",
                "Resource Type": "",
                "Description": "",
                "URL": "",
                "Free": "",
                "Rating": "",
            })

        culture = _culture_for(snapshot, language.id, language.name)
        scores = culture.cultural_info or synthesize_culture_scores(language.fsi.category, language.speakers)
        culture_info.append({
            "Language ID": language.id,
            "Language Name": language.name,
            "Cultural Overview": culture.overview,
            "Business Use": culture.business_use,
            "Entertainment": join_list(culture.entertainment),
            "Cuisine": join_list(culture.cuisine),
            "Business Value": scores.business_use,
            "Travel Value": scores.travel_value,
            "Cultural Richness": scores.cultural_richness,
            "Online Presence": scores.online_presence,
        })

    return {
        BASIC_INFO_SHEET: basic_info,
        FSI_DETAILS_SHEET: fsi_details,
        LEARNING_RESOURCES_SHEET: learning_resources,
        CULTURE_INFO_SHEET: culture_info,
    }


def _write_sheets(rows_by_sheet: Dict[str, List[Dict[str, Any]]]) -> Workbook:
    workbook = Workbook()
    workbook.remove(workbook.active)
    header_font = Font(bold=True)

    for sheet_name, headers in SHEETS:
        sheet = workbook.create_sheet(title=sheet_name)
        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = header_font
        sheet.freeze_panes = "A2"
        for row in rows_by_sheet.get(sheet_name, []):
            sheet.append([_cell(row.get(header)) for header in headers])
        for index, header in enumerate(headers, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = max(12, len(header) + 4)

    return workbook


def serialize_workbook(snapshot: DatasetSnapshot) -> Workbook:
    """Build the four-sheet workbook for the whole dataset."""
    return _write_sheets(build_export_rows(snapshot))


def build_template_workbook() -> Workbook:
    """Workbook with the expected headers and one example row per sheet."""
    return _write_sheets({
        BASIC_INFO_SHEET: [{
            "ID": "es",
            "Name": "Spanish",
            "Native Name": "Español",
            "Countries": "Spain; Mexico; Argentina",
            "Family": "Indo-European",
            "Subfamily": "Romance",
            "Writing System": "Latin",
            "Speakers": 548000000,
            "Flag Emoji": "🇪🇸",
            "Color": "#22c55e",
        }],
        FSI_DETAILS_SHEET: [{
            "Language ID": "es",
            "Language Name": "Spanish",
            "FSI Category": 1,
            "Study Hours": 600,
            "Description": "Easiest for English Speakers",
            "Grammar Score": 2,
            "Vocabulary Score": 3,
            "Pronunciation Score": 2,
            "Writing Score": 1,
            "Cultural Score": 2,
            "Overall Difficulty": 1,
            "Grammar Difficulty": 2,
            "Pronunciation Difficulty": 2,
            "Vocabulary Difficulty": 3,
        }],
        LEARNING_RESOURCES_SHEET: [{
            "Language ID": "es",
            "Language Name": "Spanish",
            "Resource Title": "Duolingo Spanish",
            "Resource Type": "app",
            "Description": "Popular language learning app",
            "URL": "https://www.duolingo.com",
            "Free": "Yes",
            "Rating": 4,
        }],
        CULTURE_INFO_SHEET: [{
            "Language ID": "es",
            "Language Name": "Spanish",
            "Cultural Overview": "Spanish is a fascinating language with rich cultural heritage...",
            "Business Use": "Spanish is valuable for international business...",
            "Entertainment": "Flamenco; Spanish Cinema; Bullfighting",
            "Cuisine": "Paella; Tapas; Gazpacho",
            "Business Value": 4,
            "Travel Value": 5,
            "Cultural Richness": 5,
            "Online Presence": 4,
        }],
    })


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# ============================================================================
# Import
# ============================================================================

def load_workbook_bytes(data: bytes) -> Workbook:
    """
    Open an uploaded workbook.

    Raises:
        WorkbookFormatError: If the bytes are not a readable .xlsx workbook
    """
    if not data:
        raise WorkbookFormatError(FORMAT_ERROR_MESSAGE, errors=["The uploaded file is empty"])
    try:
        return load_workbook(BytesIO(data), data_only=True, read_only=True)
    except Exception as exc:
        logger.warning(f"Could not open uploaded workbook: {exc}")
        raise WorkbookFormatError(FORMAT_ERROR_MESSAGE, errors=[str(exc) or type(exc).__name__]) from exc


def read_sheet_rows(workbook: Workbook, sheet_name: str) -> List[Dict[str, Any]]:
    """
    Read a sheet into header-keyed dicts.

    The first row is the header; fully blank rows are skipped.
    """
    sheet = workbook[sheet_name]
    rows = sheet.iter_rows(values_only=True)
    header_row = next(rows, None)
    if header_row is None:
        return []
    headers = [cell_text(value) for value in header_row]

    result = []
    for values in rows:
        if all(is_blank(value) for value in values):
            continue
        row = {}
        for header, value in zip(headers, values):
            if header:
                row[header] = value
        result.append(row)
    return result


def validate_rows(
    basic_info: List[Dict[str, Any]],
    fsi_details: List[Dict[str, Any]],
    learning_resources: List[Dict[str, Any]],
    culture_info: List[Dict[str, Any]],
) -> List[str]:
    """Collect every row-level problem; rows are numbered from 1."""
    errors = []

    for index, row in enumerate(basic_info, start=1):
        if is_blank(row.get("ID")):
            errors.append(f"Basic Info row {index}: missing ID")
        if is_blank(row.get("Name")):
            errors.append(f"Basic Info row {index}: missing language name")
        if is_blank(row.get("Family")):
            errors.append(f"Basic Info row {index}: missing language family")
        speakers = row.get("Speakers")
        if not is_blank(speakers) and parse_optional_int(speakers) is None:
            errors.append(f"Basic Info row {index}: speakers must be a number")

    for index, row in enumerate(fsi_details, start=1):
        if is_blank(row.get("Language ID")):
            errors.append(f"FSI Details row {index}: missing language ID")
        # 0 is a valid category, only truly empty cells are missing
        category = row.get("FSI Category")
        if is_blank(category):
            errors.append(f"FSI Details row {index}: missing FSI category")
        elif parse_optional_int(category) is None:
            errors.append(f"FSI Details row {index}: FSI category must be a number")
        hours = row.get("Study Hours")
        if is_blank(hours):
            errors.append(f"FSI Details row {index}: missing study hours")
        elif parse_optional_int(hours) is None:
            errors.append(f"FSI Details row {index}: study hours must be a number")

    for index, row in enumerate(learning_resources, start=1):
        if is_blank(row.get("Language ID")):
            errors.append(f"Learning Resources row {index}: missing language ID")
        if not is_blank(row.get("Resource Title")) and is_blank(row.get("Resource Type")):
            errors.append(f"Learning Resources row {index}: has a title but no resource type")

    for index, row in enumerate(culture_info, start=1):
        if is_blank(row.get("Language ID")):
            errors.append(f"Culture Info row {index}: missing language ID")

    return errors


def _to_basic_info_row(row: Dict[str, Any]) -> BasicInfoRow:
    return BasicInfoRow(
        id=cell_text(row.get("ID")),
        name=cell_text(row.get("Name")),
        native_name=cell_text(row.get("Native Name")),
        countries=split_list(row.get("Countries")),
        family=cell_text(row.get("Family")),
        subfamily=cell_text(row.get("Subfamily")),
        writing_system=cell_text(row.get("Writing System")),
        speakers=parse_optional_int(row.get("Speakers")) or 0,
        flag_emoji=cell_text(row.get("Flag Emoji")),
        color=cell_text(row.get("Color")),
    )


def _to_fsi_detail_row(row: Dict[str, Any]) -> FSIDetailRow:
    return FSIDetailRow(
        language_id=cell_text(row.get("Language ID")),
        language_name=cell_text(row.get("Language Name")),
        fsi_category=parse_optional_int(row.get("FSI Category")),
        study_hours=parse_optional_int(row.get("Study Hours")),
        description=cell_text(row.get("Description")),
        grammar_score=parse_optional_int(row.get("Grammar Score")),
        vocabulary_score=parse_optional_int(row.get("Vocabulary Score")),
        pronunciation_score=parse_optional_int(row.get("Pronunciation Score")),
        writing_score=parse_optional_int(row.get("Writing Score")),
        cultural_score=parse_optional_int(row.get("Cultural Score")),
        overall_difficulty=parse_optional_int(row.get("Overall Difficulty")),
        grammar_difficulty=parse_optional_int(row.get("Grammar Difficulty")),
        pronunciation_difficulty=parse_optional_int(row.get("Pronunciation Difficulty")),
        vocabulary_difficulty=parse_optional_int(row.get("Vocabulary Difficulty")),
    )


def _to_learning_resource_row(row: Dict[str, Any]) -> LearningResourceRow:
    return LearningResourceRow(
        language_id=cell_text(row.get("Language ID")),
        language_name=cell_text(row.get("Language Name")),
        resource_title=cell_text(row.get("Resource Title")),
        resource_type=cell_text(row.get("Resource Type")).lower(),
        description=cell_text(row.get("Description")),
        url=cell_text(row.get("URL")),
        free=parse_yes_no(row.get("Free")),
        rating=parse_optional_int(row.get("Rating")),
    )


def _to_culture_info_row(row: Dict[str, Any]) -> CultureInfoRow:
    return CultureInfoRow(
        language_id=cell_text(row.get("Language ID")),
        language_name=cell_text(row.get("Language Name")),
        cultural_overview=cell_text(row.get("Cultural Overview")),
        business_use=cell_text(row.get("Business Use")),
        entertainment=split_list(row.get("Entertainment")),
        cuisine=split_list(row.get("Cuisine")),
        business_value=parse_optional_int(row.get("Business Value")),
        travel_value=parse_optional_int(row.get("Travel Value")),
        cultural_richness=parse_optional_int(row.get("Cultural Richness")),
        online_presence=parse_optional_int(row.get("Online Presence")),
    )


def parse_workbook(workbook: Workbook) -> ParsedWorkbook:
    """
    Parse the four sheets into typed rows plus every problem found.

    A missing sheet is reported and parsing continues with the others.
    Business data problems never raise; they are collected in `errors`.
    """
    errors: List[str] = []
    raw_rows: Dict[str, List[Dict[str, Any]]] = {}

    for sheet_name, _ in SHEETS:
        if sheet_name in workbook.sheetnames:
            raw_rows[sheet_name] = read_sheet_rows(workbook, sheet_name)
        else:
            errors.append(f'Missing "{sheet_name}" sheet')
            raw_rows[sheet_name] = []

    basic_info = raw_rows[BASIC_INFO_SHEET]
    fsi_details = raw_rows[FSI_DETAILS_SHEET]
    learning_resources = raw_rows[LEARNING_RESOURCES_SHEET]
    culture_info = raw_rows[CULTURE_INFO_SHEET]

    if not (basic_info or fsi_details or learning_resources or culture_info):
        errors.append(NO_DATA_MESSAGE)

    errors.extend(validate_rows(basic_info, fsi_details, learning_resources, culture_info))

    return ParsedWorkbook(
        basic_info=[_to_basic_info_row(row) for row in basic_info],
        fsi_details=[_to_fsi_detail_row(row) for row in fsi_details],
        learning_resources=[_to_learning_resource_row(row) for row in learning_resources],
        culture_info=[_to_culture_info_row(row) for row in culture_info],
        errors=errors,
    )


def import_workbook(data: bytes) -> ImportResult:
    """
    Read an uploaded workbook into typed rows.

    Args:
        data: Raw bytes of the uploaded file

    Returns:
        ImportResult; `success` is False when the file is unreadable or any row is invalid
    """
    try:
        workbook = load_workbook_bytes(data)
    except WorkbookFormatError as exc:
        return ImportResult(success=False, message=exc.message, errors=exc.errors)

    try:
        parsed = parse_workbook(workbook)
    finally:
        workbook.close()

    if parsed.errors:
        logger.info(f"Workbook import rejected with {len(parsed.errors)} errors")
        return ImportResult(
            success=False,
            message=f"Data validation failed with {len(parsed.errors)} errors",
            data=parsed,
            errors=parsed.errors,
        )

    logger.info(f"Parsed workbook with {parsed.total_rows} rows")
    return ImportResult(
        success=True,
        message=f"Successfully parsed {parsed.total_rows} rows",
        data=parsed,
    )

