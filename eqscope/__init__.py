"""Parametric EQ editor: response curves, analyzer trace and gesture editing."""

__version__ = "0.1.0"
