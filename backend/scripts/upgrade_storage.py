#!/usr/bin/env python3
"""
Upgrade Script: rewrite a legacy storage file in container form.

Usage:
    python upgrade_storage.py [path/to/storage.json]

The collector reads the old bare-array format transparently and upgrades
it on the next write, so running this is optional. It is useful before
handing the file to other tools that expect `{visits, actions}`.
Defaults to `STORAGE_PATH` from settings.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)) + '/..')

from event_store import JsonEventStore
from settings import settings


def main(path: str) -> int:
    if not os.path.exists(path):
        print(f"No storage file at {path}")
        return 1

    store = JsonEventStore(path)
    if store.upgrade():
        doc = store.load()
        print(f"Upgraded {path}: {len(doc.visits)} visits kept, actions collection added")
    else:
        print(f"{path} already uses the container format, nothing to do")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else settings.storage_path))
