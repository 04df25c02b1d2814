"""CLI package.

The ``cli`` sub-package contains the Click application.  Commands
import the library lazily so that ``abc9map --help`` stays fast.
"""
from __future__ import annotations
