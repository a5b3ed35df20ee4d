# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from typing import Any, Dict

from .coins import Coins, CoinsInput
from .msg import Msg


class MsgSend(Msg):
    """Sends coins from one account to another."""

    TYPE_URL = "/cosmos.bank.v1beta1.MsgSend"
    AMINO_TYPES = ("bank/MsgSend", "cosmos-sdk/MsgSend")

    from_address: str
    to_address: str
    amount: Coins

    def __init__(self, from_address: str, to_address: str, amount: CoinsInput):
        self.from_address = from_address
        self.to_address = to_address
        self.amount = Coins(amount)

    @classmethod
    def _from_amino_value(cls, value: Dict[str, Any], is_classic: bool) -> MsgSend:
        return MsgSend(
            value["from_address"],
            value["to_address"],
            Coins.from_amino(value["amount"]),
        )

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": self.amount.to_amino(),
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> MsgSend:
        return MsgSend(
            data["from_address"], data["to_address"], Coins.from_data(data["amount"])
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": self.amount.to_data(),
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgSend:
        return MsgSend(
            proto.from_address, proto.to_address, Coins.from_proto(proto.amount)
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            from_address=self.from_address,
            to_address=self.to_address,
            amount=self.amount.to_proto(),
        )


class Test(unittest.TestCase):
    sender = "xpla1y4umfuqfg76t8mfcff6zzx7elvy93jtp4xcdvw"
    receiver = "xpla1v9ku44wycfnsucez6fp085f5fsksp47u9x8jr4"

    def test_amino(self):
        send = MsgSend.from_amino(
            {
                "type": "bank/MsgSend",
                "value": {
                    "from_address": self.sender,
                    "to_address": self.receiver,
                    "amount": [{"denom": "axpla", "amount": "8102024952"}],
                },
            },
            True,
        )
        self.assertEqual(send.from_address, self.sender)
        self.assertEqual(send.to_address, self.receiver)
        self.assertEqual(send.amount, Coins({"axpla": 8102024952}))

        self.assertEqual(
            send.to_amino(True),
            {
                "type": "bank/MsgSend",
                "value": {
                    "from_address": self.sender,
                    "to_address": self.receiver,
                    "amount": [{"denom": "axpla", "amount": "8102024952"}],
                },
            },
        )
        self.assertEqual(send.to_amino(False)["type"], "cosmos-sdk/MsgSend")
        self.assertEqual(MsgSend.from_amino(send.to_amino()), send)

    def test_data(self):
        data = {
            "@type": "/cosmos.bank.v1beta1.MsgSend",
            "from_address": self.sender,
            "to_address": self.receiver,
            "amount": [{"denom": "axpla", "amount": "8102024952"}],
        }
        send = MsgSend.from_data(data)
        self.assertEqual(send.amount, Coins({"axpla": 8102024952}))
        self.assertEqual(send.to_data(), data)
        self.assertEqual(send.to_data(True), data)

    def test_proto(self):
        send = MsgSend(self.sender, self.receiver, "1axpla,2uatom")
        self.assertEqual(MsgSend.from_proto(send.to_proto()), send)
        self.assertEqual(MsgSend.unpack_any(send.pack_any()), send)

    def test_empty_amount(self):
        send = MsgSend(self.sender, self.receiver, None)
        self.assertEqual(MsgSend.from_proto(send.to_proto()), send)
        self.assertEqual(MsgSend.from_data(send.to_data()), send)
        self.assertEqual(MsgSend.from_amino(send.to_amino()), send)


if __name__ == "__main__":
    unittest.main()
