"""Root conftest: loads .env.test before chat_hub.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"


def _load_env_file(path: Path) -> None:
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        # Real environment wins over the file.
        os.environ.setdefault(key.strip(), value.strip().strip("'\""))


if _env_test.exists():
    _load_env_file(_env_test)
