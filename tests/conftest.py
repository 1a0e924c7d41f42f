from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.manifest_builder import FIXTURE_API, ManifestBuilder


@pytest.fixture
def manifest_builder(tmp_path: Path) -> ManifestBuilder:
    """Provide a reusable manifest builder rooted at the pytest tmp_path."""
    return ManifestBuilder(tmp_path)


@pytest.fixture
def guestbook_api() -> Path:
    """Directory holding the bundled guestbook API manifests."""
    return FIXTURE_API


@pytest.fixture(autouse=True)
def _reset_refdocs_logging() -> Iterator[None]:
    """Undo handlers installed by CLI runs so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("refdocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
