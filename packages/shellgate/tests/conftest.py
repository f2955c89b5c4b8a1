from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

from shellgate.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}
_SHELLGATE_ENV = (
    "SHELLGATE_SHELLCHECK_VERSION",
    "SHELLGATE_SHELLCHECK_IMAGE",
    "SHELLGATE_CONTAINER_RUNTIME",
    "SHELLGATE_JOBS",
)

_ROOT = Path(__file__).resolve().parents[3]
_HYPOTHESIS_DB = _ROOT / "_output/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("shellgate", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("shellgate")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_shellgate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SHELLGATE_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("RUN_ID", raising=False)


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "hack").mkdir()
    return repo


@pytest.fixture
def ctx(repo_root: Path) -> RunContext:
    return RunContext(run_id="pytest-run", repo_root=repo_root)
