"""Shared fixtures: a headless Qt core application for signals and timers."""

from __future__ import annotations

import gc
from typing import Iterator

import pytest
from PySide6.QtCore import QCoreApplication

# Module level: the application must outlive every QObject the tests create.
_APP = QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture(scope="session", autouse=True)
def qt_core_app() -> Iterator[QCoreApplication]:
    yield _APP
    gc.collect()
