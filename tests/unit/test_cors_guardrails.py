from __future__ import annotations

import pytest

from apps.api_gateway.main import _cors_params, _parse_origins
from recall_notetaker.common.config import get_settings


@pytest.fixture()
def cors_settings():
    s = get_settings()
    keys = ["cors_allowed_origins", "cors_allow_credentials"]
    snapshot = {k: getattr(s, k) for k in keys}
    try:
        yield s
    finally:
        for k, v in snapshot.items():
            setattr(s, k, v)


def test_empty_origins_fall_back_to_wildcard() -> None:
    assert _parse_origins("") == ["*"]
    assert _parse_origins(" , ") == ["*"]


def test_wildcard_disables_credentials(cors_settings) -> None:
    cors_settings.cors_allowed_origins = "*"
    cors_settings.cors_allow_credentials = True

    origins, allow_credentials = _cors_params()
    assert origins == ["*"]
    assert allow_credentials is False


def test_csv_origins_keep_credentials(cors_settings) -> None:
    cors_settings.cors_allowed_origins = "http://localhost:5173, https://app.example.com"
    cors_settings.cors_allow_credentials = True

    origins, allow_credentials = _cors_params()
    assert origins == ["http://localhost:5173", "https://app.example.com"]
    assert allow_credentials is True
