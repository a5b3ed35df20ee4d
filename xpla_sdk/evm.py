# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
EVM payloads travel through the Ethereum JSON-RPC side of the chain rather than as Cosmos
messages. They are never registered or packed into a transaction body; the transaction builder and
fee estimator only look for them to skip message handling.
"""

from __future__ import annotations

import unittest
from typing import Any, List


class EvmMessage:
    """A call or transfer against the chain's EVM module."""

    from_address: str
    to_address: str
    data: str
    value: int

    def __init__(self, from_address: str, to_address: str, data: str = "", value: int = 0):
        self.from_address = from_address
        self.to_address = to_address
        self.data = data
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvmMessage):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"EvmMessage({self.from_address!r}, {self.to_address!r}, {self.data!r}, {self.value})"


def skips_message_handling(msgs: List[Any]) -> bool:
    """
    True when the message list is empty or leads with an EVM payload. Only the first message is
    inspected; a Cosmos message following an EVM payload is dropped with it.
    """
    return len(msgs) < 1 or isinstance(msgs[0], EvmMessage)


class Test(unittest.TestCase):
    def test_skips_message_handling(self):
        evm = EvmMessage("0x01", "0x02", "0x", 1)
        self.assertTrue(skips_message_handling([]))
        self.assertTrue(skips_message_handling([evm]))
        self.assertTrue(skips_message_handling([evm, object()]))
        self.assertFalse(skips_message_handling([object(), evm]))

    def test_equality(self):
        self.assertEqual(EvmMessage("0x01", "0x02"), EvmMessage("0x01", "0x02"))
        self.assertNotEqual(EvmMessage("0x01", "0x02"), EvmMessage("0x01", "0x03"))


if __name__ == "__main__":
    unittest.main()
