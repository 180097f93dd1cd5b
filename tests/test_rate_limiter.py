from fastapi import HTTPException

from wanderplan.rate_limiter import (
    check_rate_limit,
    get_rate_limit_status,
    rate_limit_exceeded,
    record_failed_attempt,
    reset_rate_limit,
)


def test_requests_past_the_limit_are_refused():
    results = [check_rate_limit("leads:203.0.113.7", 3, 60) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[-1][1] == 3
    assert 0 < results[-1][2] <= 60


def test_keys_are_counted_separately():
    for _ in range(3):
        check_rate_limit("leads:a", 3, 60)

    assert check_rate_limit("leads:b", 3, 60)[0] is True
    assert check_rate_limit("leads:a", 3, 60)[0] is False


def test_failed_attempts_reduce_remaining():
    assert get_rate_limit_status("login:x@example.com", 5) == (5, 0)

    record_failed_attempt("login:x@example.com", 900)
    record_failed_attempt("login:x@example.com", 900)
    remaining, ttl = get_rate_limit_status("login:x@example.com", 5)

    assert remaining == 3
    assert ttl > 0


def test_reset_clears_a_single_key():
    record_failed_attempt("login:x@example.com", 900)
    record_failed_attempt("login:y@example.com", 900)

    reset_rate_limit("login:x@example.com")

    assert get_rate_limit_status("login:x@example.com", 5)[0] == 5
    assert get_rate_limit_status("login:y@example.com", 5)[0] == 4


def test_exceeded_error_carries_retry_after():
    error = rate_limit_exceeded(125, "Slow down, try again in {minutes} minutes.")

    assert isinstance(error, HTTPException)
    assert error.status_code == 429
    assert error.headers == {"Retry-After": "125"}
    assert error.detail["code"] == "RATE_LIMIT_EXCEEDED"
    assert error.detail["message"] == "Slow down, try again in 3 minutes."
