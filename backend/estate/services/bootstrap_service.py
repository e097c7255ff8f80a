# Overview: Bootstrap steps; first-run detection, legacy migration and state backfilling.

"""
Bootstrap

Runs once per process start (and again on an explicit reload):

1. open the record store (fatal on failure)
2. read the migration flag
3. flag set: load the tree from the record store
4. flag unset: try the legacy importer; adopt and persist a tree that has
   customers, else load from the store; then set the flag
5. backfill collections, settings, lock flag and the main safe

The remaining steps (settings, lock, first snapshot, first view) belong to
the engine, which owns the presentation layer and history.
"""

from __future__ import annotations

import logging

from ..catalog import DATA_COLLECTIONS, MIGRATION_COMPLETE_KEY, SETTINGS_COLLECTION
from . import kv_store, record_store
from .legacy_import import load_legacy_state, read_legacy_blob, main_safe
from .persistence_service import persist, load_state_from_store
from .settings_service import normalize_settings


logger = logging.getLogger(__name__)


class BootstrapError(RuntimeError):
    """The application could not be initialized; nothing else may run."""


def load_initial_state(legacy_dir: str | None) -> dict:
    record_store.open_store()

    if kv_store.get_value(MIGRATION_COMPLETE_KEY):
        logger.info("Loading state from the record store")
        return load_state_from_store()

    logger.info("Checking for legacy data to migrate")
    legacy = load_legacy_state(read_legacy_blob(legacy_dir))
    if legacy and legacy.get("customers"):
        logger.info("Migrating %d legacy customers into the record store", len(legacy["customers"]))
        if not persist(legacy):
            raise BootstrapError("Migrated legacy data could not be written to the record store")
        state = legacy
        logger.info("Migration successful")
    else:
        logger.info("No data to migrate, loading state from the record store")
        state = load_state_from_store()

    kv_store.set_value(MIGRATION_COMPLETE_KEY, True)
    return state


def backfill_state(state: dict) -> bool:
    """
    Bring a loaded tree up to the invariants.

    Returns True when a main safe had to be synthesized (the caller persists).
    """
    for name in DATA_COLLECTIONS:
        if not isinstance(state.get(name), list):
            state[name] = []
    state[SETTINGS_COLLECTION] = normalize_settings(state.get(SETTINGS_COLLECTION))
    state["locked"] = bool(state.get("locked"))

    if not state["safes"]:
        state["safes"] = [main_safe()]
        logger.info("Synthesized main safe %s", state["safes"][0]["id"])
        return True
    return False
