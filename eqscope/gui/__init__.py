"""GUI launcher for the EQ editor."""
from __future__ import annotations

from .main_window import EqualiserWindow, run

__all__ = ["run", "EqualiserWindow"]
