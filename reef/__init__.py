"""Reef: a small dynamically typed scripting language with lexical closures."""

__version__ = "0.1.0"
