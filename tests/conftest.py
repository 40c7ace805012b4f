"""Shared fixtures for the NumField test-suite."""

from __future__ import annotations

import logging

import pytest

from logger import setup_logger


@pytest.fixture(autouse=True, scope="session")
def session_logger(tmp_path_factory):
    """Keep log files of the test run out of the user's home directory."""

    return setup_logger(log_dir=tmp_path_factory.mktemp("logs"), console_level=logging.WARNING)
