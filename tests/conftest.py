"""Shared pytest fixtures for Rentaly tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_oidc_jwks_cache():
    """Reset the module-level JWKS cache so keys from one test never leak into another."""
    import rentaly.api.auth as auth_module

    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0
    yield
    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0


@pytest.fixture(autouse=True)
def _default_settings_env(monkeypatch):
    """Pin business settings so a developer's shell cannot change test outcomes."""
    for name in (
        "RENTALY_CURRENCY",
        "RENTALY_COMMISSION_PER_NIGHT",
        "RENTALY_ALLOW_OVERBOOKING",
        "RENTALY_LOCAL_TZ",
    ):
        monkeypatch.delenv(name, raising=False)
