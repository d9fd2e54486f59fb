import pytest

from hybrid_storage.api.app import create_app
from hybrid_storage.exceptions import MissingConfiguration
from hybrid_storage.settings import Settings
from hybrid_storage.toolkit.object_storage import R2Service

R2_SETTINGS = {
    "R2_ACCOUNT_ID": "account",
    "R2_ACCESS_KEY_ID": "key",
    "R2_SECRET_ACCESS_KEY": "secret",
    "R2_BUCKET_NAME": "admissions",
    "R2_ENDPOINT": "https://account.r2.cloudflarestorage.com",
}


def test_missing_object_store_configuration_is_reported():
    settings = Settings(R2_BUCKET_NAME="admissions", _env_file=None)

    with pytest.raises(MissingConfiguration) as exc_info:
        settings.validate_object_store()

    assert exc_info.value.missing == ["R2_ACCOUNT_ID", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_ENDPOINT"]


def test_app_refuses_to_start_without_object_store_configuration():
    with pytest.raises(MissingConfiguration):
        create_app(Settings(_env_file=None))


def test_app_builds_the_r2_service_from_settings():
    app = create_app(Settings(**R2_SETTINGS, _env_file=None))

    assert isinstance(app.state.storage_router.object_storage, R2Service)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("HYBRID_STORAGE__INLINE_MAX_SIZE", "2048")
    monkeypatch.setenv("HYBRID_STORAGE__OBJECT_STORE_MIN_SIZE", "1024")
    monkeypatch.setenv("HYBRID_STORAGE__PRIORITY_TYPES", '["application/pdf"]')
    monkeypatch.setenv("HYBRID_STORAGE__SIGNED_URL_EXPIRES_IN", "600")

    policy = Settings(_env_file=None).storage_policy()

    assert policy.inline_max_bytes == 2048
    assert policy.object_store_min_bytes == 1024
    assert policy.priority_types == frozenset({"application/pdf"})
    assert policy.signed_url_expires_in == 600
    assert "image/png" in policy.inline_eligible_types


def test_default_policy_matches_the_defaults():
    policy = Settings(_env_file=None).storage_policy()

    assert policy.inline_max_bytes == 5 * 1024 * 1024
    assert policy.object_store_min_bytes == 1024 * 1024
    assert policy.signed_url_expires_in == 3600
