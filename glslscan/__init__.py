"""Scan GLSL sources for uniform and attribute declarations."""

__version__ = "0.1.0"
