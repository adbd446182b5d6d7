import inspect
from pathlib import Path

from openpyxl import Workbook

from app.api.v1.endpoints import admin
from app.core.data_store import LANGUAGES
from app.services import workbook_service

API = "/api/v1"


def upload(client, content, filename="languages.xlsx"):
    return client.post(
        f"{API}/admin/import-excel",
        files={"file": (filename, content, workbook_service.XLSX_MEDIA_TYPE)},
    )


# ============================================================================
# Public reads
# ============================================================================

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_languages(client):
    data = client.get(f"{API}/languages").json()
    assert data["total"] == 28
    assert len(data["languages"]) == 28


def test_list_languages_by_category(client):
    data = client.get(f"{API}/languages", params={"fsi_categories": "5"}).json()
    assert sorted(language["id"] for language in data["languages"]) == ["ja", "yue", "zh"]


def test_invalid_category_is_bad_request(client):
    response = client.get(f"{API}/languages", params={"fsi_categories": "9"})
    assert response.status_code == 400
    assert response.json()["type"] == "ValidationError"


def test_search_languages(client):
    data = client.get(f"{API}/languages", params={"search": "span"}).json()
    assert data["languages"][0]["id"] == "es"


def test_get_language(client):
    data = client.get(f"{API}/languages/es").json()
    assert data["name"] == "Spanish"
    assert data["fsi"]["details"] == {"grammar": 2, "vocabulary": 3, "pronunciation": 2, "writing": 1, "cultural": 2}


def test_unknown_language_is_not_found(client):
    assert client.get(f"{API}/languages/spanish").status_code == 404
    assert client.get(f"{API}/languages/spanish/detail").status_code == 404


def test_language_families(client):
    data = client.get(f"{API}/languages/families").json()
    families = {family["id"]: family for family in data["families"]}
    assert data["total"] == len(families)
    assert families["indo-european"]["language_count"] == 16
    assert families["sino-tibetan"]["average_difficulty"] == 9.0
    assert families["uralic"]["language_count"] == 0


def test_language_families_by_difficulty(client):
    data = client.get(f"{API}/languages/families", params={"by_difficulty": "true"}).json()
    averages = [family["average_difficulty"] for family in data["families"]]
    assert averages == sorted(averages)
    assert all(family["language_count"] > 0 for family in data["families"])


def test_language_family_detail(client):
    data = client.get(f"{API}/languages/families/sino-tibetan").json()
    assert sorted(language["id"] for language in data["languages"]) == ["yue", "zh"]
    assert client.get(f"{API}/languages/families/klingon").status_code == 404


def test_country_languages(client):
    data = client.get(f"{API}/languages/countries/Canada").json()
    assert [language["id"] for language in data["languages"]] == ["en", "fr"]
    assert data["difficulty_avg"] == 2.0
    assert client.get(f"{API}/languages/countries/Atlantis").status_code == 404


def test_language_detail(client):
    data = client.get(f"{API}/languages/ja/detail").json()
    assert data["speaker_stats"]["total"] == "125M"
    assert data["geography"]["continents"] == ["Asia"]
    assert data["has_custom_culture"] is True
    assert "book" in data["learning_resources"]


def test_featured_and_compare(client):
    featured = client.get(f"{API}/languages/featured").json()
    assert [language["id"] for language in featured["languages"]] == ["es", "fr", "de", "zh"]

    compared = client.get(f"{API}/languages/compare", params={"ids": "es,xx,ja"}).json()
    assert [language["id"] for language in compared["languages"]] == ["es", "ja"]
    assert compared["not_found"] == ["xx"]


def test_language_culture_falls_back_to_template(client):
    data = client.get(f"{API}/languages/de/culture").json()
    assert data["has_custom_info"] is False
    assert data["culture"]["overview"].startswith("German")


def test_filter_options(client):
    data = client.get(f"{API}/languages/filters").json()
    assert data["fsi_categories"] == [0, 1, 2, 3, 4, 5]


# ============================================================================
# Spreadsheet import and export
# ============================================================================

def test_export_then_import(client, store):
    response = client.get(f"{API}/admin/export-excel")
    assert response.status_code == 200
    assert response.headers["content-type"] == workbook_service.XLSX_MEDIA_TYPE
    assert "languages-data-" in response.headers["content-disposition"]

    imported = upload(client, response.content)

    assert imported.status_code == 200
    body = imported.json()
    assert body["summary"]["basic_info"] == 28
    assert body["outcomes"]["languages"]["updated"] == 28
    assert body["reload_required"] is True
    assert len(store.read_document(LANGUAGES)) == 28


def test_template_download(client):
    response = client.get(f"{API}/admin/excel-template")
    assert response.status_code == 200
    assert workbook_service.import_workbook(response.content).success


def test_import_rejects_wrong_extension(client):
    response = upload(client, b"ID,Name", filename="languages.csv")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_import_reports_format_error(client):
    response = upload(client, b"definitely not a workbook")
    assert response.status_code == 400
    assert response.json()["detail"] == "File format error or corrupted file"


def test_import_reports_row_errors(client, store):
    previous = store.read_text(LANGUAGES)
    workbook = workbook_service.build_template_workbook()
    workbook[workbook_service.BASIC_INFO_SHEET]["A2"] = None

    response = upload(client, workbook_service.workbook_to_bytes(workbook))

    assert response.status_code == 400
    assert "Basic Info row 1: missing ID" in response.json()["errors"]
    assert store.read_text(LANGUAGES) == previous


def test_imported_language_appears_after_reload(client):
    workbook = workbook_service.build_template_workbook()
    sheet = workbook[workbook_service.BASIC_INFO_SHEET]
    sheet["A2"] = "xx"
    sheet["B2"] = "Xyzlang"
    sheet["E2"] = "TestFam"
    workbook.remove(workbook[workbook_service.FSI_DETAILS_SHEET])
    workbook.create_sheet(workbook_service.FSI_DETAILS_SHEET).append(workbook_service.FSI_DETAILS_HEADERS)

    assert upload(client, workbook_service.workbook_to_bytes(workbook)).status_code == 200
    assert client.get(f"{API}/languages/xx").status_code == 404

    assert client.post(f"{API}/admin/reload").json()["languages_count"] == 29
    language = client.get(f"{API}/languages/xx").json()
    assert language["fsi"]["category"] == 3
    assert language["fsi"]["hours"] == 1100


def test_fsi_only_import_updates_stored_language(client):
    workbook = Workbook()
    workbook.remove(workbook.active)
    for sheet_name, headers in workbook_service.SHEETS:
        workbook.create_sheet(sheet_name).append(headers)
    workbook[workbook_service.FSI_DETAILS_SHEET].append(["es", "Spanish", 5, 2200])

    response = upload(client, workbook_service.workbook_to_bytes(workbook))

    assert response.status_code == 200
    assert response.json()["outcomes"]["languages"]["updated"] == 1
    client.post(f"{API}/admin/reload")
    language = client.get(f"{API}/languages/es").json()
    assert language["name"] == "Spanish"
    assert language["fsi"]["category"] == 5
    assert language["fsi"]["hours"] == 2200


# ============================================================================
# Saves and backups
# ============================================================================

def test_save_culture_info_requires_fields(client):
    response = client.post(
        f"{API}/admin/save-culture-info",
        json={"language_id": "de", "culture_info": {"overview": "Overview"}},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == ["culture_info.business_use is required"]


def test_save_culture_info(client):
    response = client.post(
        f"{API}/admin/save-culture-info",
        json={"language_id": "de", "culture_info": {"overview": "Overview", "business_use": "Business"}},
    )
    assert response.status_code == 200
    assert Path(response.json()["backup_path"]).exists()

    stored = client.get(f"{API}/admin/culture-info", params={"language_id": "de"}).json()
    assert stored["has_custom_info"] is True
    assert stored["data"]["overview"] == "Overview"
    assert client.get(f"{API}/admin/culture-info").json()["count"] == 4


def test_save_learning_resources(client, store):
    response = client.post(
        f"{API}/admin/save-learning-resources",
        json={"language_id": "ro", "resources": [{"title": "Podcast", "type": "Podcast", "free": True}]},
    )
    assert response.status_code == 200
    assert store.reload().resources["ro"][0]["type"] == "podcast"


def test_save_data_memory_only(client):
    response = client.post(f"{API}/admin/save-data", json={"languages": [{"id": "xx", "name": "Xyzlang"}]})
    body = response.json()
    assert response.status_code == 200
    assert body["persistent"] is False
    assert client.get(f"{API}/admin/save-data").json()["backups"] == []


def test_save_data_to_file_then_restore(client, store):
    original = store.read_text(LANGUAGES)
    response = client.post(
        f"{API}/admin/save-data",
        json={"languages": [{"id": "xx", "name": "Xyzlang"}], "save_to_file": True},
    )
    backup_path = response.json()["backup_path"]
    assert response.json()["persistent"] is True

    backups = client.get(f"{API}/admin/save-data").json()["backups"]
    assert [backup["path"] for backup in backups] == [backup_path]

    restored = client.post(f"{API}/admin/restore-backup", json={"backup_path": backup_path})
    assert restored.status_code == 200
    assert store.read_text(LANGUAGES) == original


def test_save_data_requires_languages(client):
    response = client.post(f"{API}/admin/save-data", json={"languages": []})
    assert response.status_code == 400


def test_restore_outside_backups_is_rejected(client):
    response = client.post(f"{API}/admin/restore-backup", json={"backup_path": "/etc/passwd"})
    assert response.status_code == 400


def test_data_quality(client):
    data = client.get(f"{API}/admin/data-quality").json()
    assert data["valid"] is True
    assert data["stats"]["total_languages"] == 28


def test_save_data_rejects_duplicate_ids(client):
    response = client.post(
        f"{API}/admin/save-data",
        json={"languages": [{"id": "xx", "name": "A"}, {"id": "xx", "name": "B"}], "save_to_file": True},
    )
    assert response.status_code == 409
    assert response.json()["errors"] == ["xx"]


def test_save_resources_for_unknown_language(client):
    response = client.post(
        f"{API}/admin/save-learning-resources",
        json={"language_id": "qq", "resources": []},
    )
    assert response.status_code == 404


def test_admin_handlers_run_in_threadpool():
    # Blocking file I/O must not run on the event loop
    for route in admin.router.routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
