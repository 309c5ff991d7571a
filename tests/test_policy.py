"""Tests for outcome policies and settings validation."""
import random

import pytest
from pydantic import ValidationError

from config import Settings
from core.policy import FixedOutcomePolicy, RandomOutcomePolicy, device_policy, order_policy


class TestRandomOutcomePolicy:
    """Test suite for RandomOutcomePolicy."""

    @pytest.mark.unit
    def test_device_delays_within_inclusive_window(self) -> None:
        policy = device_policy(rng=random.Random(7))
        delays = {policy.draw_delay() for _ in range(500)}
        assert delays == {1.0, 2.0, 3.0, 4.0, 5.0}

    @pytest.mark.unit
    def test_order_delays_within_inclusive_window(self) -> None:
        policy = order_policy(rng=random.Random(7))
        delays = {policy.draw_delay() for _ in range(1000)}
        assert min(delays) == 2.0
        assert max(delays) == 8.0

    @pytest.mark.unit
    def test_failure_rate_roughly_respected(self) -> None:
        policy = device_policy(rng=random.Random(42))
        failures = sum(policy.should_fail() for _ in range(10000))
        assert 800 < failures < 1200

    @pytest.mark.unit
    def test_zero_failure_rate_never_fails(self) -> None:
        policy = RandomOutcomePolicy(0, 0, 0.0)
        assert not any(policy.should_fail() for _ in range(100))

    @pytest.mark.unit
    def test_inverted_window_rejected(self) -> None:
        with pytest.raises(ValueError, match="min_delay"):
            RandomOutcomePolicy(5, 1, 0.1)

    @pytest.mark.unit
    def test_failure_rate_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError, match="failure_rate"):
            RandomOutcomePolicy(1, 5, 1.5)


@pytest.mark.unit
def test_fixed_policy_is_deterministic() -> None:
    policy = FixedOutcomePolicy(delay=0.25, fail=True)
    assert policy.draw_delay() == 0.25
    assert policy.should_fail() is True


class TestSettings:
    """Settings validation."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.max_concurrent_requests == 8
        assert settings.deletion_delay_seconds == 2.0
        assert (settings.device_min_delay_seconds, settings.device_max_delay_seconds) == (1, 5)
        assert (settings.order_min_delay_seconds, settings.order_max_delay_seconds) == (2, 8)
        assert settings.stale_idempotency_is_miss is True

    @pytest.mark.unit
    def test_log_level_normalised(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.unit
    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    @pytest.mark.unit
    def test_inverted_delay_window(self) -> None:
        with pytest.raises(ValidationError):
            Settings(device_min_delay_seconds=6, device_max_delay_seconds=2)

    @pytest.mark.unit
    def test_failure_rate_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Settings(order_failure_rate=-0.1)

    @pytest.mark.unit
    def test_allowed_origins_list(self) -> None:
        settings = Settings(allowed_origins="http://a.test, http://b.test")
        assert settings.get_allowed_origins_list() == ["http://a.test", "http://b.test"]
