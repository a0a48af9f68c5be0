"""
Shisha charcoal timer.

Tracks per-table charcoal sessions for a shisha lounge:
- models: tables and their sessions
- core: transitions, registry, session engine, tick runner, notifiers
- routes/server: HTTP API
- cli: command-line client
"""

__version__ = "0.1.0"
