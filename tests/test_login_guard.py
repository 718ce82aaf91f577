"""Unit tests for the in-memory failed-login guard."""

from unittest.mock import Mock

import pytest

from storefront.adapters.rate_limit.login_guard import InMemoryLoginGuard


def _guard(clock: Mock, **kwargs) -> InMemoryLoginGuard:
    return InMemoryLoginGuard(max_failures=5, cooldown_seconds=900, clock=clock, **kwargs)


def test_unknown_key_is_allowed() -> None:
    guard = _guard(Mock(return_value=1000.0))

    decision = guard.check("1.2.3.4")

    assert decision.allowed is True
    assert decision.failure_count == 0
    assert decision.retry_after_seconds == 0


def test_locks_after_max_failures() -> None:
    clock = Mock(return_value=1000.0)
    guard = _guard(clock)

    for expected in range(1, 5):
        assert guard.record_failure("ip").failure_count == expected
        assert guard.check("ip").allowed is True

    guard.record_failure("ip")
    decision = guard.check("ip")

    assert decision.allowed is False
    assert decision.failure_count == 5
    assert decision.retry_after_seconds == pytest.approx(900)
    assert decision.retry_after_minutes == 15


def test_retry_after_minutes_rounds_up() -> None:
    clock = Mock(return_value=1000.0)
    guard = _guard(clock)
    for _ in range(5):
        guard.record_failure("ip")

    clock.return_value = 1000.0 + 841  # 59 s left
    decision = guard.check("ip")

    assert decision.allowed is False
    assert decision.retry_after_minutes == 1

    clock.return_value = 1000.0 + 1  # 899 s left
    assert guard.check("ip").retry_after_minutes == 15


def test_lockout_expires_lazily_and_record_is_kept() -> None:
    clock = Mock(return_value=1000.0)
    guard = _guard(clock)
    for _ in range(5):
        guard.record_failure("ip")

    clock.return_value = 1000.0 + 900
    decision = guard.check("ip")

    assert decision.allowed is True
    assert decision.failure_count == 5
    assert guard.get_record("ip") is not None


def test_failure_after_cooldown_locks_again_immediately() -> None:
    clock = Mock(return_value=1000.0)
    guard = _guard(clock)
    for _ in range(5):
        guard.record_failure("ip")

    clock.return_value = 2000.0
    assert guard.record_failure("ip").failure_count == 6
    assert guard.check("ip").allowed is False


def test_success_resets_count() -> None:
    guard = _guard(Mock(return_value=1000.0))
    for _ in range(3):
        guard.record_failure("ip")

    guard.record_success("ip")

    assert guard.get_record("ip") is None
    assert guard.check("ip").failure_count == 0
    assert guard.record_failure("ip").failure_count == 1


def test_success_for_unknown_key_is_noop() -> None:
    guard = _guard(Mock(return_value=1000.0))

    guard.record_success("nobody")

    assert len(guard) == 0


def test_keys_are_isolated() -> None:
    guard = _guard(Mock(return_value=1000.0))
    for _ in range(5):
        guard.record_failure("a")

    assert guard.check("a").allowed is False
    assert guard.check("b").allowed is True


def test_evicts_oldest_failure_when_full() -> None:
    clock = Mock(return_value=1000.0)
    guard = _guard(clock, max_records=2)

    guard.record_failure("a")
    clock.return_value = 1001.0
    guard.record_failure("b")
    clock.return_value = 1002.0
    guard.record_failure("a")  # "a" is now the most recent
    clock.return_value = 1003.0
    guard.record_failure("c")

    assert len(guard) == 2
    assert guard.get_record("b") is None
    assert guard.get_record("a").failure_count == 2
    assert guard.get_record("c").failure_count == 1


def test_get_record_returns_copy() -> None:
    guard = _guard(Mock(return_value=1000.0))
    guard.record_failure("ip")

    record = guard.get_record("ip")
    record.failure_count = 99

    assert guard.get_record("ip").failure_count == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_failures": 0},
        {"cooldown_seconds": 0},
        {"max_records": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryLoginGuard(**kwargs)
