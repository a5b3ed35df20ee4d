# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import math
import typing
from typing import Awaitable, Callable, Tuple, Type

T = typing.TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """A fixed delay between attempts and a cap on how many attempts are made."""

    interval: float
    max_attempts: int

    def __init__(self, interval: float, max_attempts: int):
        if interval < 0:
            raise ValueError(f"Interval must not be negative, got {interval}")
        if max_attempts < 1:
            raise ValueError(f"At least one attempt is required, got {max_attempts}")
        self.interval = interval
        self.max_attempts = max_attempts

    def __repr__(self) -> str:
        return f"RetryPolicy(interval={self.interval}, max_attempts={self.max_attempts})"

    @staticmethod
    def from_timeout(timeout: float, interval: float) -> RetryPolicy:
        """Enough attempts to cover timeout seconds, and always at least one."""
        attempts = math.ceil(timeout / interval) if interval > 0 else 1
        return RetryPolicy(interval, max(1, attempts))


class RetriesExhausted(Exception):
    """Every attempt allowed by the policy failed with a retryable error"""

    attempts: int
    last_error: Exception

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


async def retry_with_fixed_interval(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retryable: Tuple[Type[Exception], ...],
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Runs operation until it returns, sleeping policy.interval between attempts. Only exceptions
    listed in retryable are retried; anything else propagates immediately. Attempts never overlap
    and there is no sleep after the last one.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except retryable as error:
            logging.debug(f"Attempt {attempt}/{policy.max_attempts} failed: {error}")
            if attempt == policy.max_attempts:
                raise RetriesExhausted(attempt, error) from error
        await sleep(policy.interval)
    raise AssertionError("unreachable")


import unittest
import unittest.mock


class NotReady(Exception):
    pass


class Test(unittest.IsolatedAsyncioTestCase):
    async def test_from_timeout(self):
        self.assertEqual(RetryPolicy.from_timeout(60.0, 0.5).max_attempts, 120)
        self.assertEqual(RetryPolicy.from_timeout(0.001, 0.5).max_attempts, 1)
        self.assertEqual(RetryPolicy.from_timeout(1.2, 0.5).max_attempts, 3)
        self.assertEqual(RetryPolicy.from_timeout(0, 0.5).max_attempts, 1)
        with self.assertRaises(ValueError):
            RetryPolicy(0.5, 0)

    async def test_succeeds_after_retries(self):
        sleep = unittest.mock.AsyncMock()
        operation = unittest.mock.AsyncMock(side_effect=[NotReady(), NotReady(), "done"])

        result = await retry_with_fixed_interval(
            operation, RetryPolicy(0.5, 5), (NotReady,), sleep
        )
        self.assertEqual(result, "done")
        self.assertEqual(operation.await_count, 3)
        self.assertEqual(sleep.await_args_list, [unittest.mock.call(0.5)] * 2)

    async def test_exhausted(self):
        sleep = unittest.mock.AsyncMock()
        operation = unittest.mock.AsyncMock(side_effect=NotReady("missing"))

        with self.assertRaises(RetriesExhausted) as context:
            await retry_with_fixed_interval(
                operation, RetryPolicy(0.5, 3), (NotReady,), sleep
            )
        self.assertEqual(context.exception.attempts, 3)
        self.assertIsInstance(context.exception.last_error, NotReady)
        self.assertEqual(operation.await_count, 3)
        self.assertEqual(sleep.await_count, 2)

    async def test_fatal_error_is_not_retried(self):
        sleep = unittest.mock.AsyncMock()
        operation = unittest.mock.AsyncMock(side_effect=KeyError("boom"))

        with self.assertRaises(KeyError):
            await retry_with_fixed_interval(
                operation, RetryPolicy(0.5, 3), (NotReady,), sleep
            )
        self.assertEqual(operation.await_count, 1)
        sleep.assert_not_awaited()

    async def test_attempts_are_sequential(self):
        events = []

        async def operation():
            events.append("start")
            await asyncio.sleep(0)
            events.append("end")
            raise NotReady()

        with self.assertRaises(RetriesExhausted):
            await retry_with_fixed_interval(
                operation, RetryPolicy(0, 3), (NotReady,)
            )
        self.assertEqual(events, ["start", "end"] * 3)


if __name__ == "__main__":
    unittest.main()
