"""Shared test fixtures: small directories and a manual scheduler."""

import json
from pathlib import Path

import pytest

from areafinder.directory import AreaDirectory
from areafinder.index import build_index
from areafinder.postcode import build_coverage

SMALL_DIRECTORY = {
    "groups": [
        {
            "prefix": "BA",
            "name": "Bath & East Somerset",
            "areas": [
                {"code": "BA5", "town": "Wells", "keywords": "Coxley, Wookey"},
                {"code": "BA6", "town": "Glastonbury", "keywords": "Street, Meare"},
                {"code": "BA16", "town": "Street", "keywords": "Walton, Butleigh"},
                {"code": "BA20/21/22", "town": "Yeovil", "keywords": "Preston, Mudford"},
            ],
        },
        {
            "prefix": "TA",
            "name": "Taunton & West Somerset",
            "areas": [
                {"code": "TA6/7", "town": "Bridgwater", "keywords": "Hamp, Wembdon"},
                {"code": "TA21", "town": "Wellington", "keywords": "Rockwell Green"},
            ],
        },
    ],
    "detail_routes": {"BA5": "/areas/wells-ba5"},
    "coverage_names": {"BA6": "Glastonbury & Meare"},
}


@pytest.fixture()
def directory_data() -> dict:
    """A fresh copy of the small directory document."""
    return json.loads(json.dumps(SMALL_DIRECTORY))


@pytest.fixture()
def directory(directory_data: dict) -> AreaDirectory:
    return AreaDirectory.from_mapping(directory_data)


@pytest.fixture()
def index(directory: AreaDirectory):
    return build_index(directory)


@pytest.fixture()
def coverage(directory: AreaDirectory):
    return build_coverage(directory)


@pytest.fixture()
def directory_file(tmp_path: Path, directory_data: dict) -> Path:
    """The small directory written to disk as JSON."""
    path = tmp_path / "areas.json"
    path.write_text(json.dumps(directory_data), encoding="utf-8")
    return path


class _Handle:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for a timer: time only moves on ``advance``."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[_Handle] = []

    def call_later(self, delay: float, callback) -> _Handle:
        handle = _Handle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[_Handle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for handle in list(self.handles):
            if not handle.cancelled and handle.due <= self.now:
                handle.cancelled = True
                handle.callback()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def navigations() -> list:
    """Records every URL passed to the navigate callback."""
    return []
