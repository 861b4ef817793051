#!/usr/bin/env python3
"""Demo: Editing a stored document field by field.

Replays the edits a user might make in a document editor, shows how the
pending ``$set``/``$unset`` clauses collapse as edits cancel each other,
then applies the result to an in-memory store.

Run from the project root:
    python examples/demo_edit_session.py
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from fieldpatch import ChangeTracker, DuplicateFieldError, InMemoryDocumentStore, apply_changes

# ANSI colors
GREEN = "\033[92m"
RED = "\033[91m"
CYAN = "\033[96m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"


def _show(step: str, tracker: ChangeTracker) -> None:
    update = tracker.update_description.to_update()
    print(f"  {step:<38} {CYAN}{json.dumps(update)}{RESET}")


def main() -> None:
    original = {"_id": "a1", "name": "Aphex Twin", "label": "Warp", "year": 1991}
    store = InMemoryDocumentStore()
    store.insert(original)

    print(f"\n{BOLD}Stored document{RESET}")
    print(f"  {DIM}{json.dumps(store.get('a1'))}{RESET}\n")

    tracker = ChangeTracker(dict(original))

    print(f"{BOLD}Edits{RESET}")
    tracker.add("loc", "London")
    _show('add("loc", "London")', tracker)
    tracker.update("label", "Ninja Tune")
    _show('update("label", "Ninja Tune")', tracker)
    tracker.remove("loc")
    _show('remove("loc")', tracker)
    tracker.add("", "")
    _show('add("", "")', tracker)
    tracker.rename("", "alias")
    _show('rename("", "alias")', tracker)
    tracker.update("alias", "AFX")
    _show('update("alias", "AFX")', tracker)
    tracker.remove("year")
    _show('remove("year")', tracker)

    step = 'rename("alias", "name")'
    try:
        tracker.rename("alias", "name")
    except DuplicateFieldError as exc:
        print(f"  {step:<38} {RED}{exc}{RESET}")

    print(f"\n{BOLD}Applying{RESET}")
    print(f"  filter: {tracker.lookup_key}")
    applied = apply_changes(tracker, store)
    print(f"  applied: {GREEN if applied else RED}{applied}{RESET}")
    print(f"  {DIM}{json.dumps(store.get('a1'))}{RESET}\n")


if __name__ == "__main__":
    main()
