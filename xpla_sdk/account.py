# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from typing import Any, Dict, Optional

from . import public_key
from .numeric import parse_optional_uint64
from .public_key import EthSecp256k1PublicKey, PublicKey, SimplePublicKey

ETH_ACCOUNT = "/ethermint.types.v1.EthAccount"


class BaseAccount:
    """On-chain account metadata needed to sign: the account number and the next sequence number."""

    address: str
    public_key: Optional[PublicKey]
    account_number: int
    sequence: int

    def __init__(
        self,
        address: str,
        public_key: Optional[PublicKey],
        account_number: int,
        sequence: int,
    ):
        self.address = address
        self.public_key = public_key
        self.account_number = account_number
        self.sequence = sequence

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseAccount):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"BaseAccount({self.address!r}, sequence={self.sequence})"

    def get_sequence_number(self) -> int:
        return self.sequence

    def get_public_key(self) -> Optional[PublicKey]:
        return self.public_key

    @staticmethod
    def from_data(data: Dict[str, Any]) -> BaseAccount:
        """
        Parses the "account" object of an auth query. EVM-compatible accounts wrap the base account
        one level deeper.
        """
        if data.get("@type") == ETH_ACCOUNT:
            data = data["base_account"]
        pub_key = data.get("pub_key")
        return BaseAccount(
            data["address"],
            public_key.from_data(pub_key) if pub_key else None,
            parse_optional_uint64(data.get("account_number"), "account_number"),
            parse_optional_uint64(data.get("sequence"), "sequence"),
        )


class Test(unittest.TestCase):
    address = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"
    key = "AjszqFJDRAYbEjZMuiD+ChqzbUSGq/RRu3zr0R6iJB5b"

    def test_base_account(self):
        account = BaseAccount.from_data(
            {
                "@type": "/cosmos.auth.v1beta1.BaseAccount",
                "address": self.address,
                "pub_key": {"@type": "/cosmos.crypto.secp256k1.PubKey", "key": self.key},
                "account_number": "12",
                "sequence": "5",
            }
        )
        self.assertEqual(account.get_sequence_number(), 5)
        self.assertEqual(account.account_number, 12)
        self.assertEqual(account.get_public_key(), SimplePublicKey(self.key))

    def test_new_account_without_key(self):
        account = BaseAccount.from_data(
            {
                "@type": "/cosmos.auth.v1beta1.BaseAccount",
                "address": self.address,
                "pub_key": None,
                "account_number": "12",
                "sequence": "0",
            }
        )
        self.assertIsNone(account.get_public_key())
        self.assertEqual(account.get_sequence_number(), 0)

    def test_eth_account(self):
        account = BaseAccount.from_data(
            {
                "@type": ETH_ACCOUNT,
                "base_account": {
                    "address": self.address,
                    "pub_key": {
                        "@type": "/ethermint.crypto.v1.ethsecp256k1.PubKey",
                        "key": self.key,
                    },
                    "account_number": "3",
                    "sequence": "9",
                },
                "code_hash": "0xc5d2",
            }
        )
        self.assertEqual(account.get_sequence_number(), 9)
        self.assertIsInstance(account.get_public_key(), EthSecp256k1PublicKey)


if __name__ == "__main__":
    unittest.main()
