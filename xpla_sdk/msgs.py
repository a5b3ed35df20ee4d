# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
Registry of every message and proposal type this SDK understands, keyed by protobuf type URL and
by Amino tag. Both tables are built once at import and are read-only afterwards.
"""

from __future__ import annotations

import types
import unittest
from typing import Any, Dict, Mapping, Optional, Type

from . import protos
from .bank import MsgSend
from .coins import Coin
from .gov import MsgDeposit, MsgSubmitProposal, TextProposal
from .ibc import (
    ClientUpdateProposal,
    Height,
    MsgChannelCloseConfirm,
    MsgChannelCloseInit,
    MsgConnectionOpenInit,
    MsgTimeout,
    MsgTimeoutOnClose,
    Packet,
)
from .msg import Msg, UnknownMessageError, UnsupportedRepresentationError, b64encode
from .staking import MsgDelegate, MsgUndelegate
from .wasm import MsgExecuteContract, MsgInstantiateContract

_MESSAGE_TYPES = [
    MsgSend,
    MsgDelegate,
    MsgUndelegate,
    MsgDeposit,
    MsgSubmitProposal,
    TextProposal,
    ClientUpdateProposal,
    MsgChannelCloseInit,
    MsgChannelCloseConfirm,
    MsgTimeout,
    MsgTimeoutOnClose,
    MsgConnectionOpenInit,
    MsgInstantiateContract,
    MsgExecuteContract,
]


class UnknownMsg(Msg):
    """
    A message of a type missing from the registry, kept exactly as it was received so results that
    carry it can still be read and re-encoded. One decoded from Data holds the JSON object, one
    unpacked from an Any holds the serialized bytes; each can only be written back in its own form.
    """

    TYPE_URL = ""

    data: Optional[Dict[str, Any]]
    value: Optional[bytes]

    def __init__(
        self,
        type_url: str,
        data: Optional[Dict[str, Any]] = None,
        value: Optional[bytes] = None,
    ):
        self.TYPE_URL = type_url
        self.data = data
        self.value = value

    def to_amino(self, is_classic: bool = False) -> Dict[str, Any]:
        raise UnsupportedRepresentationError(self.TYPE_URL)

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> UnknownMsg:
        return UnknownMsg(data["@type"], data=dict(data))

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        if self.data is None:
            return {"@type": self.TYPE_URL, "value": b64encode(self.value or b"")}
        return dict(self.data)

    def to_proto(self, is_classic: bool = False) -> Any:
        raise UnsupportedRepresentationError(self.TYPE_URL, "proto")

    def pack_any(self, is_classic: bool = False) -> Any:
        if self.value is None:
            raise UnsupportedRepresentationError(self.TYPE_URL, "proto")
        return protos.Any(type_url=self.TYPE_URL, value=self.value)

    @classmethod
    def unpack_any(cls, envelope: Any, is_classic: bool = False) -> UnknownMsg:
        return UnknownMsg(envelope.type_url, value=envelope.value)


def _by_type_url() -> Mapping[str, Type[Msg]]:
    registry: Dict[str, Type[Msg]] = {}
    for msg_type in _MESSAGE_TYPES:
        assert msg_type.TYPE_URL not in registry, msg_type.TYPE_URL
        registry[msg_type.TYPE_URL] = msg_type
    return types.MappingProxyType(registry)


def _by_amino_type() -> Mapping[str, Type[Msg]]:
    registry: Dict[str, Type[Msg]] = {}
    for msg_type in _MESSAGE_TYPES:
        if msg_type.AMINO_TYPES is None:
            continue
        for tag in msg_type.AMINO_TYPES:
            registry[tag] = msg_type
    return types.MappingProxyType(registry)


BY_TYPE_URL = _by_type_url()
BY_AMINO_TYPE = _by_amino_type()


def lookup(type_url: str) -> Type[Msg]:
    if type_url not in BY_TYPE_URL:
        raise UnknownMessageError(type_url)
    return BY_TYPE_URL[type_url]


def unpack_any(envelope: Any, is_classic: bool = False, strict: bool = True) -> Msg:
    """
    Decodes an Any through the registry. With strict=False an unregistered type becomes an
    UnknownMsg instead of raising UnknownMessageError.
    """
    if not strict and envelope.type_url not in BY_TYPE_URL:
        return UnknownMsg.unpack_any(envelope, is_classic)
    return lookup(envelope.type_url).unpack_any(envelope, is_classic)


def from_data(data: Dict[str, Any], is_classic: bool = False, strict: bool = True) -> Msg:
    if not strict and data["@type"] not in BY_TYPE_URL:
        return UnknownMsg.from_data(data, is_classic)
    return lookup(data["@type"]).from_data(data, is_classic)


def from_amino(data: Dict[str, Any], is_classic: bool = False) -> Msg:
    tag = data["type"]
    if tag not in BY_AMINO_TYPE:
        raise UnknownMessageError(tag)
    return BY_AMINO_TYPE[tag].from_amino(data, is_classic)


class Test(unittest.TestCase):
    address = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"

    def representatives(self):
        return [
            MsgSend(self.address, self.address, "1axpla"),
            MsgUndelegate(self.address, "xplavaloper1", Coin("axpla", 1)),
            MsgChannelCloseConfirm(
                "transfer", "channel-0", "", Height(1, 2), self.address
            ),
            MsgTimeout(
                Packet(1, "transfer", "channel-0", "transfer", "channel-1", "", None, 0),
                "",
                None,
                1,
                self.address,
            ),
            MsgSubmitProposal(TextProposal("t", "d"), "1axpla", self.address),
            ClientUpdateProposal("t", "d", "07-tm-0", "07-tm-1"),
            MsgInstantiateContract(self.address, None, 1, {"count": 0}),
        ]

    def test_unpack_any_dispatch(self):
        for msg in self.representatives():
            unpacked = unpack_any(msg.pack_any())
            self.assertIs(type(unpacked), type(msg))
            self.assertEqual(unpacked, msg)

    def test_from_data_dispatch(self):
        for msg in self.representatives():
            self.assertEqual(from_data(msg.to_data()), msg)

    def test_from_amino_dispatch(self):
        for msg in self.representatives():
            if msg.AMINO_TYPES is None:
                with self.assertRaises(UnsupportedRepresentationError):
                    msg.to_amino()
                continue
            self.assertEqual(from_amino(msg.to_amino(True), True), msg)
            self.assertEqual(from_amino(msg.to_amino(False), False), msg)

    def test_tag_selection(self):
        msg = MsgSend(self.address, self.address, "1axpla")
        self.assertEqual(msg.to_amino(True)["type"], "bank/MsgSend")
        self.assertEqual(msg.to_amino(False)["type"], "cosmos-sdk/MsgSend")
        self.assertIs(BY_AMINO_TYPE["bank/MsgSend"], MsgSend)
        self.assertIs(BY_AMINO_TYPE["cosmos-sdk/MsgSend"], MsgSend)

    def test_unknown(self):
        with self.assertRaises(UnknownMessageError):
            unpack_any(protos.Any(type_url="/cosmos.bank.v1beta1.MsgMultiSend"))
        with self.assertRaises(UnknownMessageError):
            from_data({"@type": "/cosmos.bank.v1beta1.MsgMultiSend"})
        with self.assertRaises(UnknownMessageError):
            from_amino({"type": "bank/MsgMultiSend", "value": {}})

    def test_unknown_kept_when_lenient(self):
        vote = {
            "@type": "/cosmos.gov.v1beta1.MsgVote",
            "proposal_id": "4",
            "voter": self.address,
            "option": "VOTE_OPTION_YES",
        }
        msg = from_data(vote, strict=False)
        self.assertIsInstance(msg, UnknownMsg)
        self.assertEqual(msg.TYPE_URL, "/cosmos.gov.v1beta1.MsgVote")
        self.assertEqual(msg.to_data(), vote)
        with self.assertRaises(UnsupportedRepresentationError):
            msg.pack_any()
        with self.assertRaises(UnsupportedRepresentationError):
            msg.to_amino()

        envelope = protos.Any(
            type_url="/ibc.applications.transfer.v1.MsgTransfer", value=b"\n\x08transfer"
        )
        msg = unpack_any(envelope, strict=False)
        self.assertIsInstance(msg, UnknownMsg)
        self.assertEqual(msg.pack_any(), envelope)
        self.assertEqual(
            msg.to_data(),
            {"@type": "/ibc.applications.transfer.v1.MsgTransfer", "value": "Cgh0cmFuc2Zlcg=="},
        )

    def test_registered_types_decode_normally_when_lenient(self):
        for msg in self.representatives():
            self.assertEqual(unpack_any(msg.pack_any(), strict=False), msg)
            self.assertEqual(from_data(msg.to_data(), strict=False), msg)

    def test_read_only(self):
        with self.assertRaises(TypeError):
            BY_TYPE_URL["/x"] = MsgSend  # type: ignore


if __name__ == "__main__":
    unittest.main()
