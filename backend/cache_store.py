"""
JSON-file key/value store with two scopes.

  sync  - small preferences (feature toggles)
  local - history set, history metadata and the prerequisite catalog

Each scope is one JSON object on disk at <cache_dir>/<scope>.json.
"""

import json
import os
import sys
import tempfile
import threading

SCOPES = ("sync", "local")

PREREQS_ENABLED_KEY = "mdePrereqsEnabled"

SCHEMA_KEY = "mdeCacheSchema"
SCHEMA_VERSION = 2

HISTORY_KEY = "mdeHistoryCourses"
HISTORY_META_KEY = "mdeHistoryMeta"  # {"studentId": str, "savedAt": epoch seconds}
PREREQ_KEY = "mdePrereqCache"

# v1 caches stored savedAt in epoch milliseconds.
_MS_THRESHOLD = 10_000_000_000


class JsonCacheStore:
    def __init__(self, cache_dir: str):
        self.cache_dir = cache_dir
        self._lock = threading.Lock()

    def _path(self, scope: str) -> str:
        if scope not in SCOPES:
            raise ValueError(f"Unknown cache scope: {scope!r}")
        return os.path.join(self.cache_dir, f"{scope}.json")

    def _read(self, scope: str) -> dict:
        path = self._path(scope)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            print(f"[WARN] Ignoring unreadable cache file {path}: {exc}", file=sys.stderr)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, scope: str, data: dict) -> None:
        path = self._path(scope)
        os.makedirs(self.cache_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{scope}.", suffix=".tmp", dir=self.cache_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, sort_keys=True)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, scope: str, key: str, default=None):
        with self._lock:
            return self._read(scope).get(key, default)

    def get_many(self, scope: str, defaults: dict) -> dict:
        with self._lock:
            data = self._read(scope)
        return {k: data.get(k, v) for k, v in defaults.items()}

    def set(self, scope: str, values: dict) -> None:
        with self._lock:
            data = self._read(scope)
            data.update(values)
            self._write(scope, data)

    def clear(self, scope: str) -> None:
        with self._lock:
            self._write(scope, {})


# ── Schema migration ──────────────────────────────────────────────────────────

def _migrate_prereq_entries(raw) -> dict:
    """
    v1 entries were either a list of groups or a flat list of course codes
    (one course per group). Anything else is dropped.
    """
    if not isinstance(raw, dict):
        return {}
    migrated = {}
    for course, value in raw.items():
        if not isinstance(value, list):
            continue
        if not value:
            migrated[course] = []
        elif all(isinstance(g, list) for g in value):
            migrated[course] = [[c for c in g if isinstance(c, str)] for g in value]
        elif all(isinstance(c, str) for c in value):
            migrated[course] = [[c] for c in value]
    return migrated


def _migrate_history_meta(raw):
    if not isinstance(raw, dict):
        return None
    student_id = raw.get("studentId")
    saved_at = raw.get("savedAt")
    if not isinstance(student_id, str) or isinstance(saved_at, bool) or not isinstance(saved_at, (int, float)):
        return None
    if saved_at > _MS_THRESHOLD:
        saved_at = saved_at / 1000.0
    return {"studentId": student_id, "savedAt": float(saved_at)}


def migrate_local_data(data: dict) -> tuple[dict, bool]:
    """
    Upgrades a local-scope document to SCHEMA_VERSION.

    Returns (migrated_data, changed). Unknown keys are preserved.
    """
    version = data.get(SCHEMA_KEY, 1)
    if version == SCHEMA_VERSION:
        return data, False

    migrated = dict(data)
    migrated[PREREQ_KEY] = _migrate_prereq_entries(data.get(PREREQ_KEY))

    history = data.get(HISTORY_KEY)
    if isinstance(history, list):
        migrated[HISTORY_KEY] = [c for c in history if isinstance(c, str)]
    else:
        migrated.pop(HISTORY_KEY, None)

    meta = _migrate_history_meta(data.get(HISTORY_META_KEY))
    if meta is None:
        migrated.pop(HISTORY_META_KEY, None)
    else:
        migrated[HISTORY_META_KEY] = meta

    migrated[SCHEMA_KEY] = SCHEMA_VERSION
    return migrated, True


def migrate_local_cache(store: JsonCacheStore, dry_run: bool = False) -> bool:
    """Runs the local-scope migration once. Returns True when data was rewritten."""
    with store._lock:
        data = store._read("local")
        if not data:
            if not dry_run:
                store._write("local", {SCHEMA_KEY: SCHEMA_VERSION})
            return False
        migrated, changed = migrate_local_data(data)
        if changed and not dry_run:
            store._write("local", migrated)
    if changed and not dry_run:
        print(f"[OK] Migrated local cache to schema v{SCHEMA_VERSION}")
    return changed
