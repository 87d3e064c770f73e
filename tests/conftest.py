# tests/conftest.py
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest

# `src/` layout without an editable install: make `core`, `adapters`, `cli` importable.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from core.config import AppSettings  # noqa: E402


@pytest.fixture
def settings(tmp_path, monkeypatch) -> AppSettings:
    # Ignore any developer .env files.
    monkeypatch.chdir(tmp_path)
    return AppSettings(_env_file=None, output_dir=tmp_path / "avatars")


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose network is the given handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)

    return factory
