"""
Upgrade a local prerequisite cache directory to the current schema.

The service runs the same migration on its first pass; this script is for
inspecting or upgrading a cache directory offline.

Usage:
    python scripts/migrate_cache.py
    python scripts/migrate_cache.py --path path/to/cache_dir
    python scripts/migrate_cache.py --dry-run
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend"))

import config
from cache_store import (
    HISTORY_KEY,
    PREREQ_KEY,
    SCHEMA_KEY,
    SCHEMA_VERSION,
    JsonCacheStore,
    migrate_local_cache,
    migrate_local_data,
)


def summarize(data: dict) -> str:
    prereqs = data.get(PREREQ_KEY)
    history = data.get(HISTORY_KEY)
    return (
        f"schema v{data.get(SCHEMA_KEY, 1)}, "
        f"{len(prereqs) if isinstance(prereqs, dict) else 0} prerequisite entries, "
        f"{len(history) if isinstance(history, list) else 0} history courses"
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Migrate the local prerequisite cache to the current schema.")
    parser.add_argument("--path", default=config.CACHE_DIR, help="Cache directory")
    parser.add_argument("--dry-run", action="store_true", help="Preview without saving")
    args = parser.parse_args(argv)

    path = os.path.abspath(args.path)
    local_file = os.path.join(path, "local.json")
    if not os.path.exists(local_file):
        print(f"[ERROR] Local cache not found: {local_file}", file=sys.stderr)
        return 1

    store = JsonCacheStore(path)
    before = store._read("local")
    print(f"[INFO] Opening: {local_file}")
    print(f"[INFO] Current: {summarize(before)}")

    migrated, changed = migrate_local_data(before)
    if not changed:
        print(f"[INFO] Already at schema v{SCHEMA_VERSION}. Nothing to do.")
        return 0

    print(f"[INFO] After:   {summarize(migrated)}")
    if args.dry_run:
        print("\n[DRY RUN] No file saved.")
        return 0

    migrate_local_cache(store)
    print(f"\n[DONE] Saved: {local_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
