"""Tests for the versioned flow history store."""

from __future__ import annotations

import json

import pytest

from zimage_api.client.flow_storage import (
    FLOW_INPUT_SETTINGS_KEY,
    FLOW_STORAGE_KEY,
    SCHEMA_VERSION,
    FlowInputSettings,
    FlowStorage,
    GeneratedImage,
    JsonFileStore,
    MemoryStore,
)

NOW = 1_700_000_000_000


class FakeClock:
    def __init__(self, start: int = NOW):
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


def make_image(image_id: str = "img-1", **overrides) -> GeneratedImage:
    fields = {
        "id": image_id,
        "url": "https://x.hf.space/a.png",
        "prompt": "a fox",
        "aspect_ratio": "16:9",
        "timestamp": NOW,
        "model": "gitee",
    }
    fields.update(overrides)
    return GeneratedImage(**fields)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def storage(store):
    return FlowStorage(store, clock=FakeClock())


# ============================================================================
# Sessions
# ============================================================================


class TestSessions:
    """Test cases for session CRUD."""

    def test_empty_store_has_no_sessions(self, storage):
        assert storage.load_sessions() == []

    def test_create_session_prepends(self, storage):
        first = storage.create_session()
        second = storage.create_session()

        sessions = storage.load_sessions()
        assert [session.id for session in sessions] == [second.id, first.id]
        assert first.id == f"flow-{NOW + 1000}"
        assert first.name.startswith("Flow ")
        assert first.images == []

    def test_update_session_replaces_images(self, storage):
        session = storage.create_session()
        images = [make_image("b"), make_image("a")]

        storage.update_session(session.id, images)

        stored = storage.get_session(session.id)
        assert [image.id for image in stored.images] == ["b", "a"]
        assert stored.updated_at > session.updated_at
        assert stored.created_at == session.created_at

    def test_update_unknown_session_is_noop(self, storage, store):
        storage.create_session()
        before = store.get(FLOW_STORAGE_KEY)

        storage.update_session("flow-missing", [make_image()])

        assert store.get(FLOW_STORAGE_KEY) == before

    def test_delete_session(self, storage):
        keep = storage.create_session()
        drop = storage.create_session()

        storage.delete_session(drop.id)

        assert [session.id for session in storage.load_sessions()] == [keep.id]
        assert storage.get_session(drop.id) is None

    def test_written_with_version_envelope_and_camel_case(self, storage, store):
        session = storage.create_session()
        storage.update_session(session.id, [make_image(is_upscaled=True, seed=5)])

        raw = json.loads(store.get(FLOW_STORAGE_KEY))
        assert raw["version"] == SCHEMA_VERSION
        stored = raw["data"][0]
        assert set(stored) == {"id", "name", "createdAt", "updatedAt", "images"}
        image = stored["images"][0]
        assert image["aspectRatio"] == "16:9"
        assert image["isUpscaled"] is True
        assert image["seed"] == 5
        assert "isBlurred" not in image


class TestLegacyAndCorruptData:
    """Values written without an envelope, or unreadable ones."""

    def test_reads_unversioned_session_list(self):
        legacy = [
            {
                "id": "flow-1",
                "name": "Flow 2024/01/01 10:00:00",
                "createdAt": 1,
                "updatedAt": 2,
                "images": [
                    {
                        "id": "i1",
                        "url": "https://x.hf.space/a.png",
                        "prompt": "cat",
                        "aspectRatio": "1:1",
                        "timestamp": 3,
                        "model": "z-image-turbo",
                        "duration": 1234.5,
                        "isBlurred": False,
                    }
                ],
            }
        ]
        storage = FlowStorage(MemoryStore({FLOW_STORAGE_KEY: json.dumps(legacy)}))

        sessions = storage.load_sessions()

        assert len(sessions) == 1
        assert sessions[0].images[0].aspect_ratio == "1:1"
        assert sessions[0].images[0].duration == 1234.5
        assert sessions[0].images[0].is_blurred is False

    def test_legacy_value_rewritten_with_envelope_on_save(self):
        legacy = [{"id": "flow-1", "name": "old", "createdAt": 1, "updatedAt": 1, "images": []}]
        store = MemoryStore({FLOW_STORAGE_KEY: json.dumps(legacy)})
        storage = FlowStorage(store, clock=FakeClock())

        storage.update_session("flow-1", [make_image()])

        raw = json.loads(store.get(FLOW_STORAGE_KEY))
        assert raw["version"] == SCHEMA_VERSION
        assert raw["data"][0]["images"][0]["id"] == "img-1"

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            json.dumps({"version": SCHEMA_VERSION + 1, "data": []}),
            json.dumps({"version": "one", "data": []}),
            json.dumps({"unexpected": True}),
            json.dumps([{"id": "flow-1"}]),
            json.dumps("a string"),
        ],
    )
    def test_unreadable_sessions_load_empty(self, raw):
        storage = FlowStorage(MemoryStore({FLOW_STORAGE_KEY: raw}))
        assert storage.load_sessions() == []


# ============================================================================
# Input settings
# ============================================================================


class TestInputSettings:
    def test_defaults(self, storage):
        settings = storage.load_input_settings()
        assert settings == FlowInputSettings()
        assert settings.prompt == ""

    def test_round_trip(self, storage, store):
        storage.save_input_settings(FlowInputSettings(aspect_ratio_index=3, resolution_index=1, prompt="hi"))

        assert storage.load_input_settings().aspect_ratio_index == 3
        raw = json.loads(store.get(FLOW_INPUT_SETTINGS_KEY))
        assert raw["data"] == {"aspectRatioIndex": 3, "resolutionIndex": 1, "prompt": "hi"}

    def test_legacy_settings(self):
        legacy = json.dumps({"aspectRatioIndex": 2, "resolutionIndex": 0, "prompt": "old"})
        storage = FlowStorage(MemoryStore({FLOW_INPUT_SETTINGS_KEY: legacy}))
        assert storage.load_input_settings().prompt == "old"

    def test_malformed_settings_fall_back(self):
        raw = json.dumps({"version": 1, "data": {"aspectRatioIndex": "wide"}})
        storage = FlowStorage(MemoryStore({FLOW_INPUT_SETTINGS_KEY: raw}))
        assert storage.load_input_settings() == FlowInputSettings()


# ============================================================================
# JsonFileStore
# ============================================================================


class TestJsonFileStore:
    def test_set_get_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested")

        assert store.get("key") is None
        store.set("key", '{"a": 1}')
        assert (tmp_path / "nested" / "key.json").read_text(encoding="utf-8") == '{"a": 1}'
        assert store.get("key") == '{"a": 1}'

        store.delete("key")
        store.delete("key")
        assert store.get("key") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("key", "1")
        store.set("key", "2")
        assert sorted(path.name for path in tmp_path.iterdir()) == ["key.json"]

    def test_flow_storage_on_disk(self, tmp_path):
        storage = FlowStorage(JsonFileStore(tmp_path), clock=FakeClock())
        session = storage.create_session()

        reopened = FlowStorage(JsonFileStore(tmp_path))
        assert reopened.get_session(session.id) is not None
