# SPDX-License-Identifier: Apache-2.0
"""Outcome classification."""
from __future__ import annotations

import asyncio

import pytest

from sensor_triggers.errors import AuthenticationError, ExecutionError, MissingEventError
from sensor_triggers.policy import Backoff, FieldMatch, Outcome, Policy, evaluate, evaluate_error


@pytest.mark.parametrize("status", ["OK", 200, 500, "ERROR", None])
def test_no_policy_accepts_any_response(status):
    assert evaluate(None, status, {"anything": True}) is Outcome.SUCCESS


@pytest.mark.parametrize(
    "exc",
    [ExecutionError("boom"), asyncio.TimeoutError(), AuthenticationError("bad"), MissingEventError("x")],
)
def test_no_policy_never_retries_errors(exc):
    assert evaluate_error(None, exc) is Outcome.FAILURE


def test_allow_list_compares_as_strings():
    policy = Policy(allow=(200, "201"))
    assert evaluate(policy, "200", None) is Outcome.SUCCESS
    assert evaluate(policy, 201, None) is Outcome.SUCCESS
    assert evaluate(policy, 404, None) is Outcome.FAILURE


def test_retry_statuses_take_precedence():
    policy = Policy(allow=(200,), retry_on=(503, 429))
    assert evaluate(policy, 503, None) is Outcome.RETRY
    assert evaluate(policy, 500, None) is Outcome.FAILURE


def test_field_match():
    policy = Policy(allow=("OK",), match=FieldMatch(path="result.status", value="billed"))
    assert evaluate(policy, "OK", {"result": {"status": "billed"}}) is Outcome.SUCCESS
    assert evaluate(policy, "OK", {"result": {"status": "pending"}}) is Outcome.FAILURE
    assert evaluate(policy, "OK", {"result": None}) is Outcome.FAILURE
    assert evaluate(policy, "OK", "plain text") is Outcome.FAILURE


def test_timeouts_retry_only_when_declared():
    assert evaluate_error(Policy(), asyncio.TimeoutError()) is Outcome.FAILURE
    assert evaluate_error(Policy(retry_on_timeout=True), asyncio.TimeoutError()) is Outcome.RETRY


def test_execution_errors_retry_only_when_declared():
    assert evaluate_error(Policy(), ExecutionError("x")) is Outcome.FAILURE
    assert evaluate_error(Policy(retry_on_error=True), ExecutionError("x")) is Outcome.RETRY


def test_authentication_errors_are_never_retried():
    policy = Policy(retry_on_error=True, retry_on_timeout=True)
    assert evaluate_error(policy, AuthenticationError("expired")) is Outcome.FAILURE


def test_backoff_intervals_grow_and_cap():
    assert list(Backoff(steps=4, duration=1.0, factor=2.0, cap=5.0).intervals()) == [1.0, 2.0, 4.0, 5.0]
    assert list(Backoff(steps=0).intervals()) == []


def test_backoff_jitter_stays_in_bounds():
    for wait in Backoff(steps=5, duration=1.0, factor=1.0, jitter=0.5).intervals():
        assert 1.0 <= wait <= 1.5
