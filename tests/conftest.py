"""Shared fixtures for atelier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from atelier.engine.transport import RecordingTransport


class ScriptedDraws:
    """Draw source returning preset values in order, then a fixed default."""

    def __init__(self, *values: float, default: float = 0.0) -> None:
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def draws() -> type[ScriptedDraws]:
    return ScriptedDraws


@pytest.fixture
def outbox() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default data directory at a temp dir."""
    path = tmp_path / "atelier"
    monkeypatch.setattr("atelier.storage.database.DEFAULT_DATA_DIR", path)
    return path
