"""Module entrypoint for ``python -m secondbrain``."""

from __future__ import annotations

from secondbrain.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
