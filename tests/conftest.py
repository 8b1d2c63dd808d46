"""Shared fixtures."""

import pytest

from resume_export.browser import BrowserSessionManager, Governor
from resume_export.config import Settings
from resume_export.models import ResumeExportModel
from tests.fakes import FakeLauncher, build_projection, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def manager(launcher: FakeLauncher) -> BrowserSessionManager:
    return BrowserSessionManager(launcher, close_timeout=1.0)


@pytest.fixture
def governor(manager: BrowserSessionManager, settings: Settings) -> Governor:
    return Governor.from_settings(manager, settings)


@pytest.fixture
def projection() -> ResumeExportModel:
    return build_projection()
