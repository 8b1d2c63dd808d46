"""Tests for settings."""

from resume_export.config import QueuePolicy, Settings, default_surface_ceiling


def test_default_ceiling_is_clamped() -> None:
    assert 5 <= default_surface_ceiling() <= 10


def test_queue_depth_defaults_to_twice_the_ceiling() -> None:
    settings = Settings(max_concurrent_surfaces=4)

    assert settings.effective_queue_depth == 8


def test_configured_queue_depth() -> None:
    settings = Settings(max_concurrent_surfaces=4, queue_depth=3)

    assert settings.effective_queue_depth == 3


def test_reject_policy_has_no_queue() -> None:
    settings = Settings(max_concurrent_surfaces=4, queue_policy=QueuePolicy.REJECT)

    assert settings.effective_queue_depth == 0


def test_settings_from_environment(monkeypatch) -> None:
    """Test environment variables use the REX_ prefix."""
    monkeypatch.setenv("REX_FRONTEND_HOST", "web.internal")
    monkeypatch.setenv("REX_QUEUE_POLICY", "reject")
    monkeypatch.setenv("REX_LOGO_ALLOWED_HOSTS", '["cdn.example.com"]')

    settings = Settings()

    assert settings.frontend_host == "web.internal"
    assert settings.queue_policy == QueuePolicy.REJECT
    assert settings.logo_allowed_hosts == ["cdn.example.com"]
