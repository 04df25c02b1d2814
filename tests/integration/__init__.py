"""Integration tests.

These run the whole pipeline against the recording host and create
real temp workspaces. Run only the fast unit tests with
``pytest tests/unit/``.
"""
from __future__ import annotations
