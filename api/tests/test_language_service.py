import pytest

from app.core.data_store import DataStore
from app.models.enums import ResourceType
from app.services import language_service
from app.services.field_rules import default_fsi_details
from conftest import make_language, write_dataset


@pytest.fixture
def custom_store(tmp_path):
    def build(languages, resources=None, culture=None):
        data_dir = tmp_path / "custom"
        write_dataset(data_dir, languages, resources, culture)
        return DataStore(data_dir=data_dir, backups_dir=data_dir / "backups")
    return build


@pytest.mark.parametrize("category, expected_category", [(1, 1), (4, 4), (0, 0), (9, 5), (-3, 0), ("2", 2)])
def test_missing_details_are_filled_from_clamped_category(category, expected_category):
    raw = make_language(fsi={"category": category, "hours": 900})
    language = language_service.adapt_language_data(raw)
    assert language.fsi.category == expected_category
    assert language.fsi.details == default_fsi_details(expected_category)


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "1e400"])
def test_non_finite_numbers_fall_back_to_zero(value):
    raw = make_language(speakers=value, fsi={"category": 2, "hours": value})
    language = language_service.adapt_language_data(raw)
    assert language.speakers == 0
    assert language.fsi.hours == 0


def test_adapter_does_not_mutate_input():
    raw = make_language()
    snapshot = dict(raw)
    language_service.adapt_language_data(raw)
    assert raw == snapshot
    assert "details" not in raw["fsi"]


def test_adapter_reads_field_aliases():
    raw = {
        "id": "xx",
        "name": "Xyzlang",
        "nativeName": "Ksyz",
        "countries": "Spain; Portugal",
        "writingSystem": "Cyrillic",
        "speakersTotal": "1500",
        "flag": "🏴",
        "category": 2,
        "hours": 750,
        "family": "TestFam",
    }
    language = language_service.adapt_language_data(raw)
    assert language.native_name == "Ksyz"
    assert language.regions == ["Spain", "Portugal"]
    assert language.writing_system == "Cyrillic"
    assert language.speakers == 1500
    assert language.flag_emoji == "🏴"
    assert language.fsi.category == 2
    assert language.fsi.hours == 750
    assert language.subfamily == "TestFam"


def test_adapter_defaults_for_sparse_record():
    language = language_service.adapt_language_data({"name": "Mandarin Chinese"})
    assert language.id == "mandarin-chinese"
    assert language.family == "Unknown"
    assert language.fsi.category == 0
    assert language.fsi.description == "Native Language"
    assert language.difficulty.overall == 0


def test_stored_difficulty_is_kept(store):
    language = language_service.get_language_by_id(store, "es")
    assert language.difficulty.overall == 3
    assert language.difficulty.pronunciation == 2


def test_get_language_by_id_exact_match(store):
    for raw in store.snapshot().languages:
        assert language_service.get_language_by_id(store, raw["id"]).id == raw["id"]
    assert language_service.get_language_by_id(store, "does-not-exist") is None


def test_id_substring_of_name_does_not_match(custom_store):
    store = custom_store([
        make_language("de", "German"),
        make_language("sv", "Swedish"),
    ])
    # "man" is part of "German" but is not an id
    assert language_service.get_language_by_id(store, "man") is None
    assert language_service.get_language_by_id(store, "german") is None
    assert language_service.get_language_by_id(store, "de").name == "German"


def test_featured_languages(store):
    featured = language_service.get_featured_languages(store)
    assert [language.id for language in featured] == ["es", "fr", "de", "zh"]


def test_featured_languages_may_return_fewer(custom_store):
    store = custom_store([make_language("es", "Spanish"), make_language("sw", "Swahili")])
    assert [language.id for language in language_service.get_featured_languages(store)] == ["es"]


def test_compare_languages_reports_unknown_ids(store):
    result = language_service.compare_languages(store, ["es", "zz", "fr", "es"])
    assert [language.id for language in result.languages] == ["es", "fr"]
    assert result.not_found == ["zz"]


def test_learning_resources_empty_for_language_without_entry(store):
    assert language_service.get_learning_resources(store, "ro") == []
    assert len(language_service.get_learning_resources(store, "ar")) == 2


def test_detail_is_idempotent(store):
    first = language_service.get_language_detail_data(store, "es")
    second = language_service.get_language_detail_data(store, "es")
    assert first is not None
    assert first.model_dump() == second.model_dump()


def test_detail_view(store):
    detail = language_service.get_language_detail_data(store, "en")
    assert detail.speaker_stats.total == "1.5B"
    assert detail.speaker_stats.native == "375M"
    assert detail.speaker_stats.rank == 1
    assert detail.geography.primary_countries == detail.regions[:3]
    assert "Europe" in detail.geography.continents
    assert set(detail.learning_resources) <= set(ResourceType)
    assert detail.has_custom_culture is False
    assert detail.culture.overview.startswith("English is a fascinating language")


def test_detail_uses_custom_culture(store):
    detail = language_service.get_language_detail_data(store, "es")
    assert detail.has_custom_culture is True
    assert detail.culture.cuisine == ["Paella", "Tapas", "Gazpacho"]


def test_detail_none_for_unknown_or_incomplete_record(custom_store):
    store = custom_store([make_language("xx", fsi={"category": 2})])
    assert language_service.get_language_detail_data(store, "xx") is None
    assert language_service.get_language_detail_data(store, "yy") is None
