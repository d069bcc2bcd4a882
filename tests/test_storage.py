import json
import pytest
from unittest.mock import MagicMock

from conectajob.core.config import Settings
from conectajob.core.security import verify_password
from conectajob.db.mongo import MongoStorage
from conectajob.db.state import AppState, create_app_state
from conectajob.db.storage import STORAGE_KEYS, JsonFileStorage, MemoryStorage, build_storage
from conectajob.models.schemas import AdminProfile, FreelancerProfile, UserRole

from conftest import project_payload, register_user, service_for


def test_memory_storage_copies_values():
    storage = MemoryStorage()
    value = {"items": [1, 2]}
    storage.save("key", value)
    value["items"].append(3)

    loaded = storage.load("key")
    assert loaded == {"items": [1, 2]}
    loaded["items"].append(4)
    assert storage.load("key") == {"items": [1, 2]}


def test_memory_storage_missing_and_delete():
    storage = MemoryStorage({"a": 1})
    assert storage.load("b") is None
    storage.delete("a")
    storage.delete("a")
    assert storage.load("a") is None


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "data" / "store.json"
    storage = JsonFileStorage(str(path))
    assert storage.load("users") is None

    storage.save("users", [{"id": "1"}])
    storage.save("projects", [])

    assert JsonFileStorage(str(path)).load("users") == [{"id": "1"}]
    assert set(json.loads(path.read_text())) == {"users", "projects"}

    storage.delete("users")
    assert storage.load("users") is None
    assert storage.load("projects") == []


def test_mongo_storage_uses_one_document_per_key():
    mock_db = MagicMock()
    collection = mock_db.__getitem__.return_value
    collection.find_one.return_value = {"_id": "conectajob_users", "value": [{"id": "1"}]}
    storage = MongoStorage(collection_name="state", db=mock_db)

    assert storage.load("conectajob_users") == [{"id": "1"}]
    collection.find_one.assert_called_once_with({"_id": "conectajob_users"})

    storage.save("conectajob_users", [])
    collection.replace_one.assert_called_once_with(
        {"_id": "conectajob_users"}, {"_id": "conectajob_users", "value": []}, upsert=True
    )

    storage.delete("conectajob_users")
    collection.delete_one.assert_called_once_with({"_id": "conectajob_users"})
    mock_db.__getitem__.assert_called_with("state")


def test_mongo_storage_missing_key():
    mock_db = MagicMock()
    mock_db.__getitem__.return_value.find_one.return_value = None
    assert MongoStorage(db=mock_db).load("conectajob_projects") is None


def test_build_storage_selects_backend(tmp_path):
    assert isinstance(build_storage(Settings(storage_backend="memory")), MemoryStorage)
    json_storage = build_storage(Settings(storage_backend="json", storage_path=str(tmp_path / "s.json")))
    assert isinstance(json_storage, JsonFileStorage)


def test_first_run_seeds_admin_and_categories():
    storage = MemoryStorage()
    state = create_app_state(Settings(storage_backend="memory", admin_password="s3cret-admin"), storage=storage)

    admin = state.users[0]
    assert isinstance(admin, AdminProfile)
    assert admin.id == "1"
    assert admin.email == "admin@conectajob.com"
    assert verify_password("s3cret-admin", admin.password_hash)
    assert [c.id for c in state.categories] == [str(i) for i in range(1, 9)]
    assert storage.load(STORAGE_KEYS["CATEGORIES"])[1] == {"id": "2", "name": "Design", "icon": "image"}


def test_seeding_runs_only_once():
    storage = MemoryStorage()
    settings = Settings(storage_backend="memory")
    state = create_app_state(settings, storage=storage)
    register_user(state, "Ana", "ana@x.com", UserRole.CLIENT)

    again = create_app_state(settings, storage=storage)
    assert len(again.users) == 2
    assert len([u for u in again.users if u.role == "admin"]) == 1


def test_persisted_layout_keeps_role_tags_and_embedded_proposals(app_state, storage, ana, bob):
    project = service_for(app_state, ana).create_project(project_payload())
    service_for(app_state, bob).submit_proposal(project.id, "I can do this")

    users = storage.load(STORAGE_KEYS["USERS"])
    assert {u["role"] for u in users} == {"admin", "client", "freelancer"}
    projects = storage.load(STORAGE_KEYS["PROJECTS"])
    assert projects[0]["status"] == "open"
    assert projects[0]["proposals"][0]["status"] == "pending"
    assert projects[0]["deadline"] == project.deadline.isoformat()

    reloaded = AppState.load(storage)
    assert isinstance(reloaded.find_user_by_id(bob.id), FreelancerProfile)
    assert reloaded.find_project(project.id).proposals[0].freelancer_id == bob.id


def test_storage_failure_propagates(app_state, ana):
    app_state.storage = MagicMock()
    app_state.storage.save.side_effect = OSError("disk full")

    with pytest.raises(OSError):
        service_for(app_state, ana).create_project(project_payload())
