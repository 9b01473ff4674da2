"""Root test configuration: isolate env-driven settings and root logging per test"""

import logging
import os

import pytest


_ENV_PREFIX = "MDPLATE_"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Drop MDPLATE_* variables from the host environment so settings start at defaults."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIX):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """CLI commands reconfigure the root logger; drop the handlers they install after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            if isinstance(handler, logging.FileHandler):
                handler.close()
    root.setLevel(level)
