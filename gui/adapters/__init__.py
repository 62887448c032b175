"""GUI adapter layer.

This package provides thin Qt-shaped adapters over engine services.

Notes
-----
Adapters exist to:
- keep widgets free of persistence details,
- keep store calls off the UI thread,
- deliver engine state to widgets as queued Qt signals.
"""
