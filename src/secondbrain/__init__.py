"""
secondbrain — vault lifecycle tooling for 2ndBrain

File: src/secondbrain/__init__.py

Purpose
- Package root. Defines package-level metadata.
- The ``2ndbrain`` command creates, updates and removes the framework layer of
  a markdown vault while leaving user-authored notes alone.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
