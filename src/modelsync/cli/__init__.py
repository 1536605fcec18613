"""CLI package.

The ``cli`` sub-package contains the Click application that renders
request documents from schema files.  It imports only from the public
subpackages of ``modelsync``.
"""
from __future__ import annotations
