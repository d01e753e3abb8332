"""
Local persistence for generation history ("flow sessions").

Two keys are kept in a key-value store:
- ``zenith-flow-sessions``: ordered list of FlowSession records, newest first
- ``zenith-flow-input-settings``: last-used aspect ratio, resolution and prompt

Values are stored as ``{"version": N, "data": ...}``. Values written by
older clients (bare list / bare object) are read as version 0 and migrated.
Unreadable values load as the empty default.
"""

from __future__ import annotations

import abc
import json
import logging
import os
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

FLOW_STORAGE_KEY = "zenith-flow-sessions"
FLOW_INPUT_SETTINGS_KEY = "zenith-flow-input-settings"
SCHEMA_VERSION = 1


class _CamelModel(BaseModel):
    # Stored with the browser client's camelCase field names
    model_config = ConfigDict(populate_by_name=True)


class GeneratedImage(_CamelModel):
    id: str
    url: str
    prompt: str
    aspect_ratio: str = Field(alias="aspectRatio")
    timestamp: int
    model: str
    seed: Optional[int] = None
    duration: Optional[Union[int, float]] = None
    is_blurred: Optional[bool] = Field(default=None, alias="isBlurred")
    is_upscaled: Optional[bool] = Field(default=None, alias="isUpscaled")


class FlowSession(_CamelModel):
    id: str
    name: str
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")
    images: List[GeneratedImage] = Field(default_factory=list)


class FlowInputSettings(_CamelModel):
    aspect_ratio_index: int = Field(default=0, alias="aspectRatioIndex")
    # 0 = 1K, 1 = 2K, independent of the aspect ratio
    resolution_index: int = Field(default=0, alias="resolutionIndex")
    prompt: str = ""


class KeyValueStore(abc.ABC):
    """Minimal string key-value store."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a truncated file
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def _now_ms() -> int:
    return int(time.time() * 1000)


class FlowStorage:
    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = _now_ms) -> None:
        """
        Args:
            store: Backing key-value store
            clock: Returns the current time in epoch milliseconds
        """
        self.store = store
        self.clock = clock

    # Envelope handling

    def _read(self, key: str) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"⚠️ [FlowStorage] Ignoring unreadable value for '{key}'")
            return None
        if isinstance(value, dict) and "version" in value and "data" in value:
            version = value["version"]
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                logger.warning(f"⚠️ [FlowStorage] Unsupported schema version {version!r} for '{key}'")
                return None
            return value["data"]
        # Version 0: unwrapped values written by the browser client
        return value

    def _write(self, key: str, data: Any) -> None:
        self.store.set(key, json.dumps({"version": SCHEMA_VERSION, "data": data}, ensure_ascii=False))

    # Sessions

    def load_sessions(self) -> List[FlowSession]:
        data = self._read(FLOW_STORAGE_KEY)
        if not isinstance(data, list):
            return []
        try:
            return [FlowSession.model_validate(item) for item in data]
        except ValidationError as e:
            logger.warning(f"⚠️ [FlowStorage] Discarding malformed sessions: {e.error_count()} error(s)")
            return []

    def save_sessions(self, sessions: List[FlowSession]) -> None:
        self._write(
            FLOW_STORAGE_KEY,
            [session.model_dump(by_alias=True, exclude_none=True) for session in sessions],
        )

    def get_session(self, session_id: str) -> Optional[FlowSession]:
        for session in self.load_sessions():
            if session.id == session_id:
                return session
        return None

    def create_session(self) -> FlowSession:
        now = self.clock()
        session = FlowSession(
            id=f"flow-{now}",
            name=f"Flow {datetime.fromtimestamp(now / 1000).strftime('%Y/%m/%d %H:%M:%S')}",
            created_at=now,
            updated_at=now,
            images=[],
        )
        sessions = self.load_sessions()
        sessions.insert(0, session)
        self.save_sessions(sessions)
        return session

    def update_session(self, session_id: str, images: List[GeneratedImage]) -> None:
        """Replace a session's images; unknown ids are ignored."""
        sessions = self.load_sessions()
        for session in sessions:
            if session.id == session_id:
                session.images = list(images)
                session.updated_at = self.clock()
                self.save_sessions(sessions)
                return

    def delete_session(self, session_id: str) -> None:
        sessions = [session for session in self.load_sessions() if session.id != session_id]
        self.save_sessions(sessions)

    # Input settings

    def load_input_settings(self) -> FlowInputSettings:
        data = self._read(FLOW_INPUT_SETTINGS_KEY)
        if isinstance(data, dict):
            try:
                return FlowInputSettings.model_validate(data)
            except ValidationError:
                logger.warning("⚠️ [FlowStorage] Discarding malformed input settings")
        return FlowInputSettings()

    def save_input_settings(self, settings: FlowInputSettings) -> None:
        self._write(FLOW_INPUT_SETTINGS_KEY, settings.model_dump(by_alias=True))
