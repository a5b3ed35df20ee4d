# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
Heights, gas amounts and sequence numbers arrive from the LCD as decimal strings. These helpers
turn them into bounded integers instead of floats.
"""

from __future__ import annotations

import math
import unittest
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1
MIN_I64 = -(2**63)
MAX_I64 = 2**63 - 1

Numeric = Union[int, str, Decimal, float]


def _to_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name}: expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    raise ValueError(f"{name}: expected an integer, got {value!r}")


def parse_uint64(value: Any, name: str = "value") -> int:
    parsed = _to_int(value, name)
    if parsed < 0 or parsed > MAX_U64:
        raise ValueError(f"{name}: {parsed} does not fit into u64")
    return parsed


def parse_int64(value: Any, name: str = "value") -> int:
    parsed = _to_int(value, name)
    if parsed < MIN_I64 or parsed > MAX_I64:
        raise ValueError(f"{name}: {parsed} does not fit into i64")
    return parsed


def parse_optional_uint64(value: Any, name: str = "value") -> int:
    """Missing or empty values count as zero, the protobuf default."""
    if value is None or value == "":
        return 0
    return parse_uint64(value, name)


def to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Route through str so 0.15 stays 0.15 rather than its binary expansion.
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value {value!r}")


def ceil_int(value: Decimal) -> int:
    return int(math.ceil(value))


def parse_code(value: Any) -> Optional[Union[int, str]]:
    """Response codes may be numbers or numeric strings; both are kept as the node sent them."""
    if value is None:
        return None
    if isinstance(value, (int, str)):
        return value
    raise ValueError(f"Unexpected response code {value!r}")


class Test(unittest.TestCase):
    def test_parse_uint64(self):
        self.assertEqual(parse_uint64("18446744073709551615"), MAX_U64)
        self.assertEqual(parse_uint64(42), 42)
        with self.assertRaises(ValueError):
            parse_uint64("18446744073709551616")
        with self.assertRaises(ValueError):
            parse_uint64("-1")
        with self.assertRaises(ValueError):
            parse_uint64("1.5")
        with self.assertRaises(ValueError):
            parse_uint64(True)

    def test_parse_int64(self):
        self.assertEqual(parse_int64("-12"), -12)
        with self.assertRaises(ValueError):
            parse_int64(str(MAX_I64 + 1))

    def test_parse_optional_uint64(self):
        self.assertEqual(parse_optional_uint64(None), 0)
        self.assertEqual(parse_optional_uint64(""), 0)
        self.assertEqual(parse_optional_uint64("7"), 7)

    def test_to_decimal(self):
        self.assertEqual(to_decimal(0.15) * 1000, Decimal("150"))
        self.assertEqual(to_decimal("850000000000"), Decimal(850000000000))
        with self.assertRaises(ValueError):
            to_decimal("abc")

    def test_ceil_int(self):
        self.assertEqual(ceil_int(Decimal("150")), 150)
        self.assertEqual(ceil_int(Decimal("150.0001")), 151)


if __name__ == "__main__":
    unittest.main()
