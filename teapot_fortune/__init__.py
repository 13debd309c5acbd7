"""Teapot Fortune: random copypastas served with a configurable status code."""

__version__ = "1.0.0"
