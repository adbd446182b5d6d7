import pytest

from app.core.data_store import DataStore
from app.services import country_service, family_service
from conftest import make_language, write_dataset


def scores(overall):
    return {"overall": overall, "grammar": overall, "pronunciation": overall, "vocabulary": overall}


@pytest.fixture
def family_store(tmp_path):
    languages = [
        make_language("es", "Spanish", family="Indo-European", difficulty=scores(3)),
        make_language("de", "German", family="Indo-European", difficulty=scores(4)),
        make_language("ja", "Japanese", family="Japonic", difficulty=scores(9)),
        make_language("id", "Indonesian", family="Austronesian", difficulty=scores(3)),
    ]
    data_dir = tmp_path / "families"
    write_dataset(data_dir, languages)
    return DataStore(data_dir=data_dir, backups_dir=data_dir / "backups")


def test_family_id():
    assert family_service.family_id("Indo-European") == "indo-european"
    assert family_service.family_id("Kra-Dai") == "kra-dai"
    assert family_service.family_id("Niger Congo") == "niger-congo"


def test_family_color():
    assert family_service.get_family_color("japonic") == "#e11d48"
    assert family_service.get_family_color("klingon") == family_service.DEFAULT_FAMILY_COLOR


def test_family_stats(family_store):
    families = {family.id: family for family in family_service.calculate_family_stats(family_store)}
    assert set(families) == set(family_service.LANGUAGE_FAMILIES)
    assert families["indo-european"].language_count == 2
    assert families["indo-european"].average_difficulty == 3.5
    assert families["japonic"].average_difficulty == 9.0
    assert families["uralic"].language_count == 0
    assert families["uralic"].average_difficulty == 0.0


def test_families_by_difficulty_skip_empty_families(family_store):
    families = family_service.get_families_by_difficulty(family_store)
    assert [family.id for family in families] == ["austronesian", "indo-european", "japonic"]


def test_languages_by_family(family_store):
    languages = family_service.get_languages_by_family(family_store, "indo-european")
    assert sorted(language.id for language in languages) == ["de", "es"]
    assert family_service.get_languages_by_family(family_store, "klingon") == []


def test_family_detail(family_store):
    detail = family_service.get_family_detail(family_store, "japonic")
    assert detail.name == "Japonic"
    assert [language.id for language in detail.languages] == ["ja"]
    assert family_service.get_family_detail(family_store, "klingon") is None


@pytest.mark.parametrize("average, color", [
    (0, "#6c757d"),
    (2.0, "#28a745"),
    (3.5, "#ffc107"),
    (6, "#fd7e14"),
    (7, "#dc3545"),
    (9, "#6f42c1"),
    (9.5, "#94a3b8"),
])
def test_country_color(average, color):
    assert country_service.get_country_color(average) == color


def test_country_language_info(store):
    info = country_service.get_country_language_info(store, "canada")
    assert info.country == "Canada"
    assert info.primary == "en"
    assert [language.id for language in info.languages] == ["en", "fr"]
    # en is 0 and fr is 4
    assert info.difficulty_avg == 2.0
    assert info.color == "#28a745"


def test_country_languages_missing_from_dataset_are_dropped(family_store):
    info = country_service.get_country_language_info(family_store, "Canada")
    assert info.languages == []
    assert info.difficulty_avg == 0.0
    assert info.color == country_service.DEFAULT_COUNTRY_COLOR


def test_unknown_country(store):
    assert country_service.get_country_language_info(store, "Atlantis") is None
