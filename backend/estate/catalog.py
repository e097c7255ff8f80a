# Overview: Fixed collection catalog and default values for the estate state tree.

"""
Collection catalog.

The record store schema is fixed: every name below is a collection created
when the store is first opened. ``settings`` and ``keyval`` are keyed by
``key``; every other collection is keyed by ``id``.
"""

from __future__ import annotations

import copy

SCHEMA_VERSION = 1

OBJECT_STORES = [
    "customers", "units", "partners", "unitPartners", "contracts", "installments",
    "partnerDebts", "safes", "transfers", "auditLog", "vouchers", "brokerDues",
    "brokers", "partnerGroups", "settings", "keyval",
]

SETTINGS_COLLECTION = "settings"
KEYVAL_COLLECTION = "keyval"
KEYED_BY_KEY = {SETTINGS_COLLECTION, KEYVAL_COLLECTION}

# Collections that hold lists of id-keyed records
DATA_COLLECTIONS = [name for name in OBJECT_STORES if name not in KEYED_BY_KEY]

# Fixed key of the single synthetic settings record
SETTINGS_RECORD_KEY = "appSettings"

# Key-value flags
MIGRATION_COMPLETE_KEY = "migrationComplete"
SCHEMA_VERSION_KEY = "schemaVersion"

THEMES = ("light", "dark")
MIN_FONT = 10
MAX_FONT = 32

DEFAULT_SETTINGS = {"theme": "dark", "font": 16, "pass": None}

MAIN_SAFE_NAME = "Main Safe"

DEFAULT_VIEW = "dash"


def key_field(collection: str) -> str:
    return "key" if collection in KEYED_BY_KEY else "id"


def default_settings() -> dict:
    return copy.deepcopy(DEFAULT_SETTINGS)


def empty_state() -> dict:
    """A tree with every collection present and empty."""
    state = {name: [] for name in DATA_COLLECTIONS}
    state[SETTINGS_COLLECTION] = default_settings()
    state["locked"] = False
    return state
