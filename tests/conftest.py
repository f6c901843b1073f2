import os
import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = REPO_ROOT / "config"

_ENV_KEYS = ("CORRECTION_SCHEMA_DIR", "PATTERN_DIR", "SCHEMA_VALIDATION_ENABLED")


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    """Writable copy of the shipped schema directory."""
    target = tmp_path / "schemas"
    shutil.copytree(CONFIG_DIR / "schemas", target)
    return target


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, schema_dir: Path) -> TestClient:
    monkeypatch.setenv("CORRECTION_SCHEMA_DIR", str(schema_dir))
    monkeypatch.setenv("PATTERN_DIR", str(CONFIG_DIR / "patterns"))
    monkeypatch.setenv("SCHEMA_VALIDATION_ENABLED", "true")

    from claimfix.api.deps import get_pattern_registry
    from claimfix.core.settings import get_settings

    get_settings.cache_clear()
    get_pattern_registry.cache_clear()

    from claimfix.main import app

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()
    get_pattern_registry.cache_clear()
    for key in _ENV_KEYS:
        os.environ.pop(key, None)
