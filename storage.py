# storage.py
import json
import os
import tempfile
from typing import Dict, Optional

from filelock import FileLock

import config
from errors import MalformedPersistedState
from logging_setup import get_logger
from models import Project
from state import AppState, normalize

logger = get_logger(__name__)


class MemoryStore:
    """Key-value store kept in a dict."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, text: str) -> None:
        self.data[key] = text


class FileStore:
    """
    Key-value store with one ``<key>.json`` file per key inside ``root``.
    Writes go through a temp file and os.replace under a file lock, so a
    reader never sees a half-written value.
    """

    def __init__(self, root: str = config.DATA_DIR, timeout: float = config.LOCK_TIMEOUT):
        self.root = root
        self.lock = FileLock(os.path.join(root, ".store.lock"), timeout=timeout)

    def _path(self, key: str) -> str:
        return os.path.join(self.root, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with self.lock:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()

    def set(self, key: str, text: str) -> None:
        os.makedirs(self.root, exist_ok=True)
        path = self._path(key)
        with self.lock:
            fd, tmp = tempfile.mkstemp(prefix=f"{key}-", suffix=".tmp", dir=self.root)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise


def save_state(store, state: AppState) -> None:
    """Write the entire project list, and the current id when there is one."""
    store.set(config.PROJECTS_KEY, json.dumps([p.to_dict() for p in state.projects]))
    if state.current_project_id is not None:
        store.set(config.CURRENT_PROJECT_KEY, json.dumps(state.current_project_id))


def decode_projects(text: str):
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedPersistedState(f"projects are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise MalformedPersistedState("projects must be a JSON array")
    projects = []
    for item in data:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            raise MalformedPersistedState(f"not a project: {item!r}")
        if not isinstance(item.get("name", ""), str) or not isinstance(item.get("expenses", []), list):
            raise MalformedPersistedState(f"not a project: {item!r}")
        try:
            projects.append(Project.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedPersistedState(f"bad expense in project {item['id']}: {e}") from e
    return tuple(projects)


def load_current_id(store) -> Optional[str]:
    raw = store.get(config.CURRENT_PROJECT_KEY)
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("ignoring unreadable %s value", config.CURRENT_PROJECT_KEY)
        return None
    return value if isinstance(value, str) else None


def load_state(store) -> AppState:
    """Read the persisted state; anything unreadable becomes an empty state."""
    raw = store.get(config.PROJECTS_KEY)
    if raw is None:
        return AppState()
    try:
        projects = decode_projects(raw)
    except MalformedPersistedState as e:
        logger.warning("discarding stored projects: %s", e)
        return AppState()
    return normalize(AppState(projects=projects, current_project_id=load_current_id(store)))
