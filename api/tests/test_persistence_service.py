import json
from pathlib import Path

from app.core.data_store import CULTURE, LANGUAGES, LEARNING_RESOURCES
from app.core.exceptions import PersistenceError
from app.schemas.culture import CultureInfoInput
from app.schemas.resource import LearningResource
from app.schemas.workbook import BasicInfoRow, CultureInfoRow, FSIDetailRow, LearningResourceRow, ParsedWorkbook
from app.services import language_service, persistence_service
from app.services.field_rules import default_fsi_details, default_hours
from conftest import make_language, write_dataset

XYZ_ROW = BasicInfoRow(id="xx", name="Xyzlang", family="TestFam")


def read_payload(store, name):
    return store.read_document(name)


def backups(store, prefix):
    return sorted(store.backups_dir.glob(f"{prefix}-*.json"))


# ============================================================================
# Languages
# ============================================================================

def test_imported_language_without_fsi_row_gets_category_three_defaults(store):
    outcome = persistence_service.persist_import(store, ParsedWorkbook(basic_info=[XYZ_ROW]))
    assert outcome[LANGUAGES].success

    store.reload()
    language = language_service.get_language_by_id(store, "xx")

    assert language.fsi.category == 3
    assert language.fsi.hours == default_hours(3) == 1100
    assert language.fsi.details == default_fsi_details(3)
    assert language.family == "TestFam"
    assert language.native_name == "Xyzlang"


def test_fsi_row_values_are_used(store):
    fsi_row = FSIDetailRow(language_id="xx", fsi_category=4, study_hours=1700, grammar_score=2)

    persistence_service.save_languages(store, [XYZ_ROW], [fsi_row])
    record = next(raw for raw in read_payload(store, LANGUAGES) if raw["id"] == "xx")

    assert record["fsi"]["category"] == 4
    assert record["fsi"]["hours"] == 1700
    assert record["fsi"]["details"]["grammar"] == 2
    assert record["fsi"]["details"]["vocabulary"] == default_fsi_details(4).vocabulary


def test_existing_id_is_updated_in_place(store):
    before = read_payload(store, LANGUAGES)
    position = [raw["id"] for raw in before].index("de")
    row = BasicInfoRow(id="de", name="German", family="Germanic", countries=["Germany"])

    outcome = persistence_service.save_languages(store, [row], [])

    after = read_payload(store, LANGUAGES)
    assert outcome.updated == 1 and outcome.created == 0
    assert len(after) == len(before)
    assert [raw["id"] for raw in after].count("de") == 1
    assert after[position]["family"] == "Germanic"
    assert after[position]["regions"] == ["Germany"]


def test_new_id_is_appended_once(store):
    before = read_payload(store, LANGUAGES)

    outcome = persistence_service.save_languages(store, [XYZ_ROW, XYZ_ROW], [])

    after = read_payload(store, LANGUAGES)
    assert len(after) == len(before) + 1
    assert after[-1]["id"] == "xx"
    assert outcome.created == 1
    assert outcome.updated == 1


def test_rows_without_id_are_skipped(store):
    outcome = persistence_service.save_languages(store, [BasicInfoRow(id="", name="Nameless")], [])
    assert outcome.skipped == 1
    assert outcome.created == 0


def test_backup_holds_previous_content(store):
    previous = store.read_text(LANGUAGES)

    outcome = persistence_service.save_languages(store, [XYZ_ROW], [])

    backup_path = Path(outcome.backup_path)
    assert backup_path.parent == store.backups_dir
    assert backup_path.name.startswith("languages-")
    assert ":" not in backup_path.name
    assert backup_path.read_text(encoding="utf-8") == previous
    assert store.read_text(LANGUAGES) != previous


def test_failed_backup_leaves_file_untouched(store):
    store.backups_dir.write_text("not a directory", encoding="utf-8")
    previous = store.read_text(LANGUAGES)

    outcome = persistence_service.save_languages(store, [XYZ_ROW], [])

    assert not outcome.success
    assert outcome.errors
    assert store.read_text(LANGUAGES) == previous


def test_missing_languages_file_is_a_failure_outcome(store):
    store.path_for(LANGUAGES).unlink()

    outcome = persistence_service.save_languages(store, [XYZ_ROW], [])

    assert not outcome.success
    assert outcome.message == "Failed to save languages"


def test_saved_changes_are_invisible_until_reload(store):
    assert language_service.get_language_by_id(store, "xx") is None

    persistence_service.save_languages(store, [XYZ_ROW], [])
    assert language_service.get_language_by_id(store, "xx") is None

    store.reload()
    assert language_service.get_language_by_id(store, "xx") is not None


def test_fsi_only_row_updates_stored_language(store):
    fsi_row = FSIDetailRow(language_id="es", fsi_category=5, study_hours=2200)

    outcomes = persistence_service.persist_import(store, ParsedWorkbook(fsi_details=[fsi_row]))

    assert outcomes[LANGUAGES].updated == 1
    store.reload()
    language = language_service.get_language_by_id(store, "es")
    assert language.name == "Spanish"
    assert language.family == "Indo-European"
    assert language.fsi.category == 5
    assert language.fsi.hours == 2200
    assert language.fsi.details == default_fsi_details(5)
    assert len(read_payload(store, LANGUAGES)) == 28


def test_fsi_only_row_for_unknown_language_is_skipped(store):
    previous = read_payload(store, LANGUAGES)
    fsi_row = FSIDetailRow(language_id="qq", fsi_category=2, study_hours=900)

    outcome = persistence_service.save_languages(store, [], [fsi_row])

    assert outcome.success
    assert outcome.skipped == 1
    assert outcome.errors == ["FSI Details row 1: unknown language id qq"]
    assert read_payload(store, LANGUAGES) == previous


# ============================================================================
# Learning resources
# ============================================================================

def test_resources_are_replaced_per_language(store):
    previous = store.read_text(LEARNING_RESOURCES)
    before = read_payload(store, LEARNING_RESOURCES)
    rows = [
        LearningResourceRow(language_id="es", resource_title="New Book", resource_type="book", free=True),
        LearningResourceRow(language_id="ro", resource_title="", resource_type=""),
    ]

    outcome = persistence_service.save_learning_resources(store, rows)

    after = read_payload(store, LEARNING_RESOURCES)
    assert outcome.success
    assert [item["title"] for item in after["es"]] == ["New Book"]
    assert after["ro"] == []
    assert after["de"] == before["de"]
    assert list(after) == sorted(after)
    assert Path(outcome.backup_path).read_text(encoding="utf-8") == previous


def test_invalid_resource_rows_are_reported(store):
    rows = [LearningResourceRow(language_id="es", resource_title="Mystery", resource_type="scroll")]

    outcome = persistence_service.save_learning_resources(store, rows)

    assert outcome.success
    assert outcome.skipped == 1
    assert outcome.errors[0].startswith("Learning Resources row 1:")
    assert read_payload(store, LEARNING_RESOURCES)["es"] == []


def test_save_language_resources(store):
    resource = LearningResource(title="Radio", type="podcast", free=True)

    outcome = persistence_service.save_language_resources(store, "it", [resource])

    assert outcome.updated == 1
    assert read_payload(store, LEARNING_RESOURCES)["it"] == [
        {"title": "Radio", "type": "podcast", "description": "", "free": True}
    ]


# ============================================================================
# Culture info
# ============================================================================

def test_culture_save_requires_overview_and_business_use(store):
    outcome = persistence_service.save_culture_info(store, "de", {"overview": "Only an overview"})

    assert not outcome.success
    assert outcome.errors == ["culture_info.business_use is required"]


def test_culture_save_writes_record_and_backups(store):
    previous = store.read_text(CULTURE)
    info = CultureInfoInput(
        overview="German overview",
        business_use="Engineering",
        entertainment="not a list",
        cuisine=["Pretzel", " "],
    )

    outcome = persistence_service.save_culture_info(store, "de", info)

    assert outcome.success
    assert outcome.created == 1
    assert Path(outcome.backup_path).read_text(encoding="utf-8") == previous

    snapshots = backups(store, "dataset-snapshot")
    assert len(snapshots) == 1
    snapshot = json.loads(snapshots[0].read_text(encoding="utf-8"))
    assert "de" not in snapshot["culture"]
    assert len(snapshot["languages"]) == len(read_payload(store, LANGUAGES))

    saved = read_payload(store, CULTURE)["de"]
    assert saved == {
        "overview": "German overview",
        "business_use": "Engineering",
        "entertainment": [],
        "cuisine": ["Pretzel"],
    }


def test_culture_save_without_existing_file(store):
    store.path_for(CULTURE).unlink()

    outcome = persistence_service.save_culture_info(
        store, "de", {"overview": "Overview", "business_use": "Business"}
    )

    assert outcome.success
    assert "dataset-snapshot" in outcome.backup_path
    assert list(read_payload(store, CULTURE)) == ["de"]


def test_culture_rows_without_required_text_are_skipped(store):
    rows = [
        CultureInfoRow(language_id="de", cultural_overview="Overview", business_use="Business",
                       business_value=4, travel_value=3, cultural_richness=5, online_presence=4),
        CultureInfoRow(language_id="it", cultural_overview="Overview only"),
    ]

    outcome = persistence_service.save_culture_rows(store, rows)

    culture = read_payload(store, CULTURE)
    assert outcome.skipped == 1
    assert culture["de"]["cultural_info"]["travel_value"] == 3
    assert "it" not in culture


# ============================================================================
# Whole dataset and backups
# ============================================================================

def test_memory_only_save_writes_nothing(store):
    previous = store.read_text(LANGUAGES)

    outcome = persistence_service.save_dataset(store, [make_language()], save_to_file=False)

    assert outcome.success
    assert outcome.backup_path is None
    assert store.read_text(LANGUAGES) == previous
    assert not store.backups_dir.exists()


def test_save_to_file_creates_backup_set_first(store):
    previous = store.read_text(LANGUAGES)

    outcome = persistence_service.save_dataset(store, [make_language()], save_to_file=True)

    backup_dir = Path(outcome.backup_path)
    info = json.loads((backup_dir / "backup-info.json").read_text(encoding="utf-8"))
    assert (backup_dir / "languages.json").read_text(encoding="utf-8") == previous
    assert "languages.json" in info["files"]
    assert [raw["id"] for raw in read_payload(store, LANGUAGES)] == ["xx"]


def test_failed_second_write_rolls_back_the_first(store, monkeypatch):
    previous = store.read_text(LANGUAGES)
    write_document = store.write_document

    def failing_write(name, payload):
        if name == LEARNING_RESOURCES:
            raise PersistenceError("disk full")
        return write_document(name, payload)

    monkeypatch.setattr(store, "write_document", failing_write)
    resources = {"xx": [LearningResource(title="Grammar", type="book")]}

    outcome = persistence_service.save_dataset(store, [make_language()], resources, save_to_file=True)

    assert not outcome.success
    assert outcome.errors == ["disk full"]
    assert store.read_text(LANGUAGES) == previous


def test_list_backups_newest_first(store):
    older = store.backups_dir / "languages-2025-01-01T00-00-00-000Z.json"
    newer = store.backups_dir / "2025-02-01T00-00-00-000Z"
    newer.mkdir(parents=True)
    older.write_text(store.read_text(LANGUAGES), encoding="utf-8")
    (newer / "backup-info.json").write_text(
        json.dumps({"timestamp": "2025-02-01T00:00:00.000Z", "files": ["languages.json"], "description": "Set"}),
        encoding="utf-8",
    )
    (store.backups_dir / "notes.txt").write_text("ignored", encoding="utf-8")

    listed = persistence_service.list_backups(store)

    assert [entry.path for entry in listed] == [str(newer), str(older)]
    assert listed[0].description == "Set"
    assert listed[1].files == ["languages.json"]


def test_restore_single_file_backup(store):
    original = store.read_text(LANGUAGES)
    saved = persistence_service.save_languages(store, [XYZ_ROW], [])

    outcome = persistence_service.restore_backup(store, saved.backup_path)

    assert outcome.success
    assert store.read_text(LANGUAGES) == original
    assert Path(outcome.backup_path).is_dir()


def test_restore_rejects_paths_outside_backups(store, tmp_path):
    outside = tmp_path / "languages-2025-01-01T00-00-00-000Z.json"
    outside.write_text(store.read_text(LANGUAGES), encoding="utf-8")

    outcome = persistence_service.restore_backup(store, str(outside))

    assert not outcome.success
    assert outcome.message == "Backup path must be inside the backups directory"


def test_restore_rejects_unreadable_backup(store):
    store.backups_dir.mkdir()
    broken = store.backups_dir / "languages-2025-01-01T00-00-00-000Z.json"
    broken.write_text("{not json", encoding="utf-8")
    previous = store.read_text(LANGUAGES)

    outcome = persistence_service.restore_backup(store, broken.name)

    assert not outcome.success
    assert store.read_text(LANGUAGES) == previous


def test_sparse_records_are_normalized_when_saved(data_dir, store):
    write_dataset(data_dir, [{"id": "yy", "name": "Sparse", "fsi": {"category": 9}}])

    persistence_service.save_dataset(store, store.read_document(LANGUAGES), save_to_file=True)

    record = read_payload(store, LANGUAGES)[0]
    assert record["fsi"]["category"] == 5
    assert record["fsi"]["details"] == default_fsi_details(5).model_dump()
    assert record["native_name"] == "Sparse"
