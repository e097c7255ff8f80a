# Overview: Presentation-layer adapter the engine pushes settings and navigation into.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .catalog import DEFAULT_SETTINGS, DEFAULT_VIEW


@dataclass
class Presentation:
    """
    Current chrome (theme, font size) and view of the back office.

    The view layer reads this through GET /api/view. A renderer callback can
    be attached to observe every navigation (tests use it to count redraws).
    """
    theme: str = DEFAULT_SETTINGS["theme"]
    font: int = DEFAULT_SETTINGS["font"]
    current_view: str = DEFAULT_VIEW
    current_param: Any = None
    renders: int = 0
    renderer: Optional[Callable[[str, Any], None]] = field(default=None, repr=False)

    def apply_settings(self, settings: dict | None) -> None:
        if not settings:
            return
        self.theme = settings.get("theme") or DEFAULT_SETTINGS["theme"]
        self.font = settings.get("font") or DEFAULT_SETTINGS["font"]

    def nav(self, view_id: str, param: Any = None) -> None:
        self.current_view = view_id
        self.current_param = param
        self.renders += 1
        if self.renderer is not None:
            self.renderer(view_id, param)

    def to_dict(self) -> dict:
        return {
            "theme": self.theme,
            "font": self.font,
            "view": self.current_view,
            "param": self.current_param,
        }
