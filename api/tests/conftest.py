"""
Shared fixtures: every test works on a private copy of the seed data.
"""
import json
import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.data_store import DataStore, get_store

SEED_DIR = Path(__file__).parent.parent / "data"
SEED_FILES = ("languages.json", "learning_resources.json", "culture_data.json")


def write_dataset(data_dir: Path, languages, resources=None, culture=None):
    """Write raw records into the three data documents."""
    data_dir.mkdir(parents=True, exist_ok=True)
    documents = {
        "languages.json": {"version": 1, "languages": languages},
        "learning_resources.json": {"version": 1, "resources": resources or {}},
        "culture_data.json": {"version": 1, "culture": culture or {}},
    }
    for file_name, document in documents.items():
        (data_dir / file_name).write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")


def make_language(language_id="xx", name="Xyzlang", **overrides):
    """Minimal raw language record."""
    record = {
        "id": language_id,
        "name": name,
        "native_name": name,
        "regions": ["Spain"],
        "family": "TestFam",
        "subfamily": "TestSub",
        "writing_system": "Latin",
        "speakers": 1_000_000,
        "flag_emoji": "🏳️",
        "color": "#000000",
        "fsi": {"category": 2, "hours": 900, "description": "Test language"},
    }
    record.update(overrides)
    return record


@pytest.fixture
def data_dir(tmp_path):
    target = tmp_path / "data"
    target.mkdir()
    for file_name in SEED_FILES:
        shutil.copy(SEED_DIR / file_name, target / file_name)
    return target


@pytest.fixture
def store(data_dir):
    return DataStore(data_dir=data_dir, backups_dir=data_dir / "backups")


@pytest.fixture
def client(store):
    from app.main import app

    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        # Startup loads the process-wide store; load the overriding store the same way
        store.load()
        yield test_client
    app.dependency_overrides.clear()
