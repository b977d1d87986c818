from pathlib import Path
from typing import Generator

import pytest
from loguru import logger

from rpw.models.settings import Settings
from rpw.utils.log import Log


@pytest.fixture
def log(tmp_path: Path) -> Generator[Log, None, None]:
    """An initialized Log writing to a temporary folder."""
    log = Log(log_folder=tmp_path / "logs")
    log.init()
    yield log
    log.close()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings backed by temporary files so the user's real settings are never touched."""
    return Settings(
        settings_file=tmp_path / "settings.json", debug_file=tmp_path / "DEBUG"
    )


@pytest.fixture(autouse=True)
def reset_loguru() -> Generator[None, None, None]:
    """Drop every loguru sink a test left behind."""
    yield
    logger.remove()

