# Overview: Service-layer operations for presentation settings and the passcode lock.

"""
Settings and lock

The passcode is stored in plain text in settings["pass"]. The lock is a
convenience prompt, not a security boundary.
"""

from __future__ import annotations

from typing import Any

from ..catalog import THEMES, MIN_FONT, MAX_FONT, DEFAULT_SETTINGS, SETTINGS_COLLECTION


class SettingsError(ValueError):
    pass


class SettingsValidationError(SettingsError):
    pass


class LockError(SettingsError):
    """Passcode mismatch; the session must be reloaded."""


def normalize_settings(value: Any) -> dict:
    """Well-formed settings with theme, font and pass all present."""
    if not isinstance(value, dict):
        return dict(DEFAULT_SETTINGS)
    return {**DEFAULT_SETTINGS, **value}


def set_theme(state: dict, theme: Any) -> dict:
    if theme not in THEMES:
        raise SettingsValidationError(f"theme must be one of {', '.join(THEMES)}")
    state[SETTINGS_COLLECTION]["theme"] = theme
    return state[SETTINGS_COLLECTION]


def set_font(state: dict, font: Any) -> dict:
    if isinstance(font, int) and not isinstance(font, bool):
        size = font
    elif isinstance(font, str) and font.strip().isdigit():
        size = int(font.strip())
    else:
        raise SettingsValidationError("font must be an integer")
    if not MIN_FONT <= size <= MAX_FONT:
        raise SettingsValidationError(f"font must be between {MIN_FONT} and {MAX_FONT}")
    state[SETTINGS_COLLECTION]["font"] = size
    return state[SETTINGS_COLLECTION]


def set_lock(state: dict, passcode: str | None) -> bool:
    """Lock with a passcode, or unlock when the passcode is empty. Returns the lock flag."""
    if passcode is not None and not isinstance(passcode, str):
        raise SettingsValidationError("passcode must be a string")
    state["locked"] = bool(passcode)
    state[SETTINGS_COLLECTION]["pass"] = passcode or None
    return state["locked"]


def check_passcode(state: dict, passcode: str | None) -> None:
    """Raise LockError unless passcode matches the stored one."""
    if not state.get("locked"):
        return
    expected = (state.get(SETTINGS_COLLECTION) or {}).get("pass")
    if passcode != expected:
        raise LockError("Incorrect passcode")
