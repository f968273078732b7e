"""Module entrypoint for ``python -m tvc_codec``."""

from __future__ import annotations

from tvc_codec.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
