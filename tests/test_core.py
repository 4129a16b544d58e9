"""
Tests for core utilities: rate limiting, session tokens, image URLs and config.
"""

import os
from unittest.mock import patch

from droneverse.core.config.environment_config import EnvironmentConfig
from droneverse.core.security.session import create_session_token, read_session_token
from droneverse.core.utils.image_urls import optimized_image_url
from droneverse.core.utils.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestRateLimiter:
    """Tests for FixedWindowRateLimiter."""

    def test_blocks_after_max_requests(self):
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
        assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        assert limiter.hit("a") is True
        assert limiter.hit("b") is True
        assert limiter.hit("a") is False

    def test_window_restarts_after_elapsing(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        assert limiter.hit("a") is True
        clock.now = 59.0
        assert limiter.hit("a") is False
        clock.now = 61.0
        assert limiter.hit("a") is True

    def test_reset(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert limiter.hit("a") is True

    def test_expired_windows_are_pruned(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=clock)
        for i in range(100):
            limiter.hit(f"10.0.0.{i}")
        assert len(limiter._windows) == 100
        clock.now = 121.0
        limiter.hit("10.0.1.1")
        assert list(limiter._windows) == ["10.0.1.1"]

    def test_live_windows_survive_pruning(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.hit("old")
        clock.now = 50.0
        limiter.hit("busy")
        clock.now = 70.0
        assert limiter.hit("new") is True
        assert sorted(limiter._windows) == ["busy", "new"]
        assert limiter.hit("busy") is False


class TestSessionTokens:
    """Tests for signed session tokens."""

    def test_round_trip(self):
        token = create_session_token("user123", "secret")
        assert read_session_token(token, "secret", max_age=60) == "user123"

    def test_wrong_secret(self):
        token = create_session_token("user123", "secret")
        assert read_session_token(token, "other", max_age=60) is None

    def test_tampered_token(self):
        token = create_session_token("user123", "secret")
        assert read_session_token(token[:-2] + "xx", "secret", max_age=60) is None

    def test_missing_token(self):
        assert read_session_token(None, "secret", max_age=60) is None
        assert read_session_token("", "secret", max_age=60) is None

    def test_expired_token(self):
        with patch("itsdangerous.timed.time.time", return_value=1_000_000):
            token = create_session_token("user123", "secret")
        with patch("itsdangerous.timed.time.time", return_value=1_000_000 + 120):
            assert read_session_token(token, "secret", max_age=60) is None

    def test_empty_secret_still_signs(self):
        token = create_session_token("user123", "")
        assert read_session_token(token, "", max_age=60) == "user123"


class TestOptimizedImageUrl:
    """Tests for thumbnail URL building."""

    def test_cloudinary_url(self):
        url = optimized_image_url("https://orig/a.jpg", "DroneVerse/WTG 1/a", cloud_name="demo")
        assert url == "https://res.cloudinary.com/demo/image/upload/c_fill,w_200,h_200,f_auto,q_auto/DroneVerse/WTG 1/a"

    def test_custom_size(self):
        url = optimized_image_url("https://orig/a.jpg", "a", width=64, height=48, cloud_name="demo")
        assert "c_fill,w_64,h_48" in url

    def test_falls_back_to_original(self):
        assert optimized_image_url("https://orig/a.jpg", "a") == "https://orig/a.jpg"
        assert optimized_image_url("https://orig/a.jpg", None, cloud_name="demo") == "https://orig/a.jpg"


class TestEnvironmentConfig:
    """Tests for EnvironmentConfig."""

    def test_reads_environment(self):
        env = {
            "DATABASE_URL": "postgresql://inspect:pw@db/droneverse",
            "RATE_LIMIT_MAX": "5",
            "ALLOW_LOCAL_IMAGES": "yes",
            "JPEG_QUALITY": "80",
            "TRUST_PROXY_HEADERS": "true",
        }
        with patch.dict(os.environ, env):
            cfg = EnvironmentConfig()
        assert cfg.database_url == "postgresql://inspect:pw@db/droneverse"
        assert cfg.trust_proxy_headers is True
        assert cfg.rate_limit_max == 5
        assert cfg.allow_local_images is True
        assert cfg.jpeg_quality == 80

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = EnvironmentConfig()
        assert cfg.upload_root_folder == "DroneVerse"
        assert cfg.session_cookie_name == "token"
        assert cfg.jpeg_quality == 90
        assert cfg.upload_backend == "local"
        assert cfg.database_url == "sqlite:///droneverse.db"
        assert cfg.trust_proxy_headers is False
