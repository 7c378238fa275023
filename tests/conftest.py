"""Root test configuration: keep tests independent of the developer's environment"""

import os

import pytest


@pytest.fixture(autouse=True)
def clear_blogpub_env(monkeypatch):
    """Remove BLOGPUB_* env vars so load_config only sees what a test sets."""
    for name in list(os.environ):
        if name.startswith("BLOGPUB_"):
            monkeypatch.delenv(name)
