from __future__ import annotations

import pytest

from meshwatch.config import MeshConfig
from meshwatch.exceptions import MeshConfigError

_ENV_KEYS = (
    "MESH_API_KEY",
    "MESH_ACCESS_TOKEN",
    "MESH_DEFAULT_ADMIN_ID",
    "MESH_HOST",
    "MESH_FRONTEND_URL",
    "MESH_PRESENCE_THRESHOLD_SECONDS",
    "MESH_HISTORY_DEFAULT_LIMIT",
    "MESH_HISTORY_MAX_LIMIT",
    "MESH_PORT",
    "MESH_DEBUG_PAYLOADS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = MeshConfig.from_env()

    assert config.api_key is None
    assert config.shared_secret_enabled is False
    assert config.default_admin_id == "ADMIN_001"
    assert config.presence_threshold_seconds == 10.0
    assert config.history_default_limit == 50
    assert config.port == 5000
    assert config.debug_payloads is False


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MESH_API_KEY", " s3cret ")
    monkeypatch.setenv("MESH_DEFAULT_ADMIN_ID", "GW_1")
    monkeypatch.setenv("MESH_PRESENCE_THRESHOLD_SECONDS", "2.5")
    monkeypatch.setenv("MESH_PORT", "8080")
    monkeypatch.setenv("MESH_FRONTEND_URL", "https://dash.example.com")
    monkeypatch.setenv("MESH_DEBUG_PAYLOADS", "yes")

    config = MeshConfig.from_env()

    assert config.api_key == "s3cret"
    assert config.shared_secret_enabled is True
    assert config.default_admin_id == "GW_1"
    assert config.presence_threshold_seconds == 2.5
    assert config.port == 8080
    assert config.frontend_url == "https://dash.example.com"
    assert config.debug_payloads is True


def test_blank_secret_disables_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MESH_API_KEY", "   ")

    assert MeshConfig.from_env().api_key is None


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MESH_PORT", "not-a-port")
    monkeypatch.setenv("MESH_API_KEY", "from-env")

    config = MeshConfig.from_env(port=9000, api_key="explicit")

    assert config.port == 9000
    assert config.api_key == "explicit"


def test_bad_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MESH_HISTORY_MAX_LIMIT", "lots")

    with pytest.raises(MeshConfigError, match="MESH_HISTORY_MAX_LIMIT"):
        MeshConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"presence_threshold_seconds": 0},
        {"history_default_limit": 0},
        {"history_max_limit": -1},
        {"default_admin_id": "  "},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(MeshConfigError):
        MeshConfig(**kwargs)  # type: ignore[arg-type]
