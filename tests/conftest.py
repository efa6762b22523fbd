"""Shared test fixtures for the redshift-dataset-annotator test suite."""

import os

import pytest
import structlog

# Set env vars at module level so they're available during test collection.
# The redshift_dataset_annotator package creates a Settings() singleton at
# import time, which happens before any fixtures run.
_TEST_ENV = {
    "AWS_REGION": "us-east-1",
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "LOG_LEVEL": "info",
    "LOG_FORMAT": "json",
}

for _key, _val in _TEST_ENV.items():
    os.environ.setdefault(_key, _val)


@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
    """Set required environment variables for all tests.

    This ensures tests don't depend on the real .env file or AWS profile.
    """
    for key, val in _TEST_ENV.items():
        monkeypatch.setenv(key, val)
    monkeypatch.delenv("AWS_ACCOUNT_ID", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo setup_logging() so no test writes to another test's captured stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the settings singleton at a temporary config directory."""
    from redshift_dataset_annotator.config import settings

    path = tmp_path / "config"
    monkeypatch.setattr(settings, "config_dir", path)
    monkeypatch.setattr(settings, "aws_account_id", None)
    return path


@pytest.fixture
def fake_quicksight():
    from tests.fakes import FakeQuickSightClient

    return FakeQuickSightClient()


@pytest.fixture
def fake_source():
    from tests.fakes import FakeAnnotationSource

    return FakeAnnotationSource()
