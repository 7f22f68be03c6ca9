from datetime import timedelta

import pytest
from cryptography.fernet import Fernet
from fastapi import HTTPException

from boothops import data_sources
from boothops.data_sources import TenantDataSourceManager
from boothops.rate_limiter import check_rate_limit, reset_rate_limits
from boothops.security_utils import (
    create_session_token,
    decode_session_token,
    generate_public_id,
    generate_public_token,
    is_valid_public_token,
    sanitize_html,
)
from tests.conftest import APP_TENANT_ID, TENANT_ID


def test_session_token_round_trip():
    token = create_session_token("user-1", "tenant-1", "admin")
    claims = decode_session_token(token)
    assert claims["sub"] == "user-1"
    assert claims["tenant_id"] == "tenant-1"
    assert claims["role"] == "admin"


def test_expired_or_garbled_session_tokens_are_rejected():
    expired = create_session_token("user-1", "tenant-1", "user", expires_delta=timedelta(seconds=-5))
    assert decode_session_token(expired) is None
    assert decode_session_token("not.a.jwt") is None


def test_public_tokens():
    token = generate_public_token()
    assert is_valid_public_token(token)
    assert not is_valid_public_token(token[:-1])
    assert not is_valid_public_token(None)
    assert len(generate_public_id()) == 11


def test_sanitize_html_keeps_formatting_only():
    cleaned = sanitize_html('<p onclick="x()">Hi <strong>there</strong><script>alert(1)</script></p>')
    assert cleaned == "<p>Hi <strong>there</strong>alert(1)</p>"
    assert sanitize_html(None) is None


def test_data_source_url_encryption(monkeypatch):
    monkeypatch.setattr(data_sources, "DATA_SOURCE_ENCRYPTION_KEY", Fernet.generate_key().decode())
    secret = data_sources.encrypt_data_source_url("postgresql://u:p@db/tenant")
    assert secret != "postgresql://u:p@db/tenant"
    assert data_sources.decrypt_data_source_url(secret) == "postgresql://u:p@db/tenant"

    monkeypatch.setattr(data_sources, "DATA_SOURCE_ENCRYPTION_KEY", Fernet.generate_key().decode())
    with pytest.raises(HTTPException) as exc:
        data_sources.decrypt_data_source_url(secret)
    assert exc.value.status_code == 500


def test_data_source_config_is_cached_until_invalidated(app_db, tenant):
    manager = TenantDataSourceManager(config_ttl=300)
    config = manager.get_config(app_db, APP_TENANT_ID)
    assert config.data_tenant_id == TENANT_ID

    tenant.is_active = False
    app_db.commit()
    assert manager.get_config(app_db, APP_TENANT_ID) is config

    manager.invalidate(APP_TENANT_ID)
    with pytest.raises(HTTPException) as exc:
        manager.get_config(app_db, APP_TENANT_ID)
    assert exc.value.status_code == 404


def test_rate_limit_window_counts_requests():
    reset_rate_limits()
    results = [check_rate_limit("test:203.0.113.9", limit=3, window_seconds=60) for _ in range(4)]
    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[-1][1] == 3
    assert 0 < results[-1][2] <= 60
    reset_rate_limits()
