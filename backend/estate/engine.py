# Overview: The estate state engine; owns the live state tree, its history and the presentation hooks.

from __future__ import annotations

import copy
import logging
import threading
import traceback
from contextlib import contextmanager
from typing import Any, Iterator

from flask import current_app

from .catalog import DATA_COLLECTIONS, DEFAULT_VIEW, SETTINGS_COLLECTION
from .presentation import Presentation
from .services import bootstrap_service, persistence_service, settings_service
from .services.audit_service import log_action
from .services.bootstrap_service import BootstrapError
from .services.history_service import DEFAULT_HISTORY_LIMIT, HistoryManager, restore_into
from .services.identifier_service import uid_for
from .services.record_store import UnknownCollectionError


logger = logging.getLogger(__name__)

EXTENSION_KEY = "estate"


class EstateEngine:
    """
    Single in-process owner of the state tree.

    Every user action follows the same order: mutate the tree, persist it,
    then record a history snapshot. One re-entrant lock serializes actions so
    that persists never overlap.
    """

    def __init__(
        self,
        *,
        legacy_dir: str | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        presentation: Presentation | None = None,
    ):
        self.state: dict = {}
        self.history = HistoryManager(limit=history_limit)
        self.presentation = presentation or Presentation()
        self.legacy_dir = legacy_dir
        self.session_locked = False
        self.ready = False
        self.fatal_error: str | None = None
        self._lock = threading.RLock()

    # ---- bootstrap ----

    def bootstrap(self) -> None:
        """Run the full initialization sequence; raises BootstrapError on any failure."""
        with self._lock:
            self.ready = False
            try:
                state = bootstrap_service.load_initial_state(self.legacy_dir)
                synthesized = bootstrap_service.backfill_state(state)
                restore_into(self.state, state)
                if synthesized:
                    self.persist()

                self.presentation.apply_settings(self.state[SETTINGS_COLLECTION])
                self.session_locked = self.state["locked"]

                self.history.clear()
                self.history.record(self.state)
                self.presentation.nav(DEFAULT_VIEW)
            except Exception as exc:
                self.fatal_error = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
                logger.exception("Failed to initialize the application")
                if isinstance(exc, BootstrapError):
                    raise
                raise BootstrapError(str(exc)) from exc

            self.fatal_error = None
            self.ready = True

    def reload(self) -> None:
        """Discard the in-memory tree and history, then bootstrap from the store."""
        with self._lock:
            logger.info("Reloading state from the record store")
            self.state.clear()
            self.history.clear()
            self.bootstrap()

    # ---- durability and history ----

    def persist(self) -> bool:
        with self._lock:
            return persistence_service.persist(self.state, on_applied=self.presentation.apply_settings)

    def commit_mutation(self, description: str | None = None, details: dict | None = None) -> bool:
        """Finish a user action: optional audit entry, persist, snapshot."""
        with self._lock:
            if description:
                log_action(self.state, description, details)
            ok = self.persist()
            self.history.record(self.state)
            return ok

    @contextmanager
    def mutation(self, description: str | None = None, details: dict | None = None) -> Iterator[dict]:
        """
        Mutate the tree inside a with-block and commit it on exit.

        If the block raises, the tree is restored from the current snapshot
        and nothing is persisted.
        """
        with self._lock:
            try:
                yield self.state
            except Exception:
                if self.history.index >= 0:
                    restore_into(self.state, self.history.stack[self.history.index])
                raise
            self.commit_mutation(description, details)

    def undo(self) -> bool:
        with self._lock:
            if not self.history.undo(self.state):
                return False
            self.persist()
            self.presentation.nav(self.presentation.current_view, self.presentation.current_param)
            return True

    def redo(self) -> bool:
        with self._lock:
            if not self.history.redo(self.state):
                return False
            self.persist()
            self.presentation.nav(self.presentation.current_view, self.presentation.current_param)
            return True

    # ---- records ----

    def collection(self, name: str) -> list[dict]:
        """Live records of a collection; an absent collection reads as empty without being created."""
        if name not in DATA_COLLECTIONS:
            raise UnknownCollectionError(f"Unknown collection: {name}")
        return self.state.get(name) or []

    def _writable(self, name: str) -> list[dict]:
        self.collection(name)
        return self.state.setdefault(name, [])

    def find_record(self, name: str, record_id: str) -> dict | None:
        return next((r for r in self.collection(name) if r.get("id") == record_id), None)

    def list_records(self, name: str) -> list[dict]:
        with self._lock:
            return copy.deepcopy(self.collection(name))

    def get_record(self, name: str, record_id: str) -> dict | None:
        with self._lock:
            return copy.deepcopy(self.find_record(name, record_id))

    def upsert_record(self, name: str, record: dict, description: str | None = None) -> dict:
        """Replace the record with the same id in place, or append it; ids are assigned when missing."""
        with self.mutation(description, {"collection": name}):
            records = self._writable(name)
            record = dict(record)
            record.setdefault("id", uid_for(name))
            for pos, existing in enumerate(records):
                if existing.get("id") == record["id"]:
                    records[pos] = record
                    break
            else:
                records.append(record)
        return record

    def delete_record(self, name: str, record_id: str, description: str | None = None) -> bool:
        with self._lock:
            if self.find_record(name, record_id) is None:
                return False
            with self.mutation(description, {"collection": name, "id": record_id}):
                records = self._writable(name)
                records[:] = [r for r in records if r.get("id") != record_id]
        return True

    # ---- settings and lock ----

    def update_settings(self, *, theme: Any = None, font: Any = None) -> dict:
        """Theme/font changes are persisted but not recorded as undo steps."""
        with self._lock:
            before = dict(self.state[SETTINGS_COLLECTION])
            try:
                if theme is not None:
                    settings_service.set_theme(self.state, theme)
                if font is not None:
                    settings_service.set_font(self.state, font)
            except settings_service.SettingsValidationError:
                self.state[SETTINGS_COLLECTION] = before
                raise
            self.persist()
            return self.state[SETTINGS_COLLECTION]

    def set_lock(self, passcode: str | None) -> bool:
        with self._lock:
            locked = settings_service.set_lock(self.state, passcode)
            self.persist()
            return locked

    def unlock(self, passcode: str | None) -> None:
        """Open a locked session; a wrong passcode reloads the engine and re-raises LockError."""
        with self._lock:
            try:
                settings_service.check_passcode(self.state, passcode)
            except settings_service.LockError:
                logger.warning("Incorrect passcode, reloading session")
                self.reload()
                raise
            self.session_locked = False

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "state": copy.deepcopy(self.state),
                "history": self.history.summary(),
                "locked": self.session_locked,
            }


def get_engine() -> EstateEngine:
    return current_app.extensions[EXTENSION_KEY]
