# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
Signer public keys as they appear in a transaction's signer infos and in account responses. The
key itself is kept as the base64 string the LCD returns.
"""

from __future__ import annotations

import unittest
from typing import Any, Dict, Type

from . import protos
from .msg import Msg, UnknownMessageError, b64decode, b64encode


class PublicKey(Msg):
    key: str

    def __init__(self, key: str):
        self.key = key

    def raw(self) -> bytes:
        return b64decode(self.key)

    @classmethod
    def from_amino(cls, data: Dict[str, Any], is_classic: bool = False) -> PublicKey:
        return cls(data["value"])

    def to_amino(self, is_classic: bool = False) -> Dict[str, Any]:
        return {"type": self.amino_type(is_classic), "value": self.key}

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> PublicKey:
        return cls(data["key"])

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {"@type": self.TYPE_URL, "key": self.key}

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> PublicKey:
        return cls(b64encode(proto.key))

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(key=self.raw())


class SimplePublicKey(PublicKey):
    """A compressed secp256k1 key."""

    TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"
    AMINO_TYPES = ("tendermint/PubKeySecp256k1", "tendermint/PubKeySecp256k1")


class EthSecp256k1PublicKey(PublicKey):
    """A secp256k1 key whose address is derived the Ethereum way."""

    TYPE_URL = "/ethermint.crypto.v1.ethsecp256k1.PubKey"
    AMINO_TYPES = ("ethermint/PubKeyEthSecp256k1", "ethermint/PubKeyEthSecp256k1")


PUBLIC_KEYS: Dict[str, Type[PublicKey]] = {
    SimplePublicKey.TYPE_URL: SimplePublicKey,
    EthSecp256k1PublicKey.TYPE_URL: EthSecp256k1PublicKey,
}


def _lookup(type_url: str) -> Type[PublicKey]:
    if type_url not in PUBLIC_KEYS:
        raise UnknownMessageError(type_url)
    return PUBLIC_KEYS[type_url]


def from_data(data: Dict[str, Any]) -> PublicKey:
    return _lookup(data["@type"]).from_data(data)


def from_amino(data: Dict[str, Any]) -> PublicKey:
    for key_type in PUBLIC_KEYS.values():
        if data["type"] == key_type.amino_type():
            return key_type.from_amino(data)
    raise UnknownMessageError(data["type"])


def unpack_any(envelope: Any) -> PublicKey:
    return _lookup(envelope.type_url).unpack_any(envelope)


class Test(unittest.TestCase):
    key = "AjszqFJDRAYbEjZMuiD+ChqzbUSGq/RRu3zr0R6iJB5b"

    def test_simple(self):
        public_key = SimplePublicKey(self.key)
        self.assertEqual(
            public_key.to_data(),
            {"@type": "/cosmos.crypto.secp256k1.PubKey", "key": self.key},
        )
        self.assertEqual(
            public_key.to_amino(),
            {"type": "tendermint/PubKeySecp256k1", "value": self.key},
        )
        self.assertEqual(len(public_key.raw()), 33)
        self.assertEqual(from_data(public_key.to_data()), public_key)
        self.assertEqual(from_amino(public_key.to_amino()), public_key)
        self.assertEqual(unpack_any(public_key.pack_any()), public_key)

    def test_eth(self):
        public_key = EthSecp256k1PublicKey(self.key)
        unpacked = unpack_any(public_key.pack_any())
        self.assertIsInstance(unpacked, EthSecp256k1PublicKey)
        self.assertEqual(unpacked, public_key)
        self.assertNotEqual(unpacked, SimplePublicKey(self.key))

    def test_placeholder(self):
        envelope = SimplePublicKey("").pack_any()
        self.assertEqual(envelope.type_url, "/cosmos.crypto.secp256k1.PubKey")
        self.assertEqual(unpack_any(envelope), SimplePublicKey(""))

    def test_unknown(self):
        with self.assertRaises(UnknownMessageError):
            unpack_any(protos.Any(type_url="/cosmos.crypto.ed25519.PubKey"))


if __name__ == "__main__":
    unittest.main()
