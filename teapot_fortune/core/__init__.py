"""Core configuration, models and HTML rendering.

Contains:
- config.py: environment resolution with defaults and the storage check
- models_io.py: immutable config and entry models shared across modules
- document.py: the HTML skeleton wrapped around every fortune
"""
