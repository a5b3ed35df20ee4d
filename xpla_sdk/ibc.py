# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
IBC channel and connection control messages. None of these have a legacy Amino codec; asking for
one raises UnsupportedRepresentationError. Proofs and packet payloads are held as base64 strings,
which is how the LCD returns them.
"""

from __future__ import annotations

import unittest
from typing import Any, Dict, List, Optional

from . import protos
from .msg import Msg, UnsupportedRepresentationError, b64decode, b64encode
from .numeric import parse_optional_uint64


class Height:
    """A height in a revisioned chain, as used for IBC timeouts and proofs."""

    revision_number: int
    revision_height: int

    def __init__(self, revision_number: int, revision_height: int):
        self.revision_number = revision_number
        self.revision_height = revision_height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Height):
            return NotImplemented
        return (
            self.revision_number == other.revision_number
            and self.revision_height == other.revision_height
        )

    def __repr__(self) -> str:
        return f"Height({self.revision_number}, {self.revision_height})"

    @staticmethod
    def from_data(data: Dict[str, str]) -> Height:
        return Height(
            parse_optional_uint64(data.get("revision_number"), "revision_number"),
            parse_optional_uint64(data.get("revision_height"), "revision_height"),
        )

    def to_data(self) -> Dict[str, str]:
        return {
            "revision_number": str(self.revision_number),
            "revision_height": str(self.revision_height),
        }

    @staticmethod
    def from_proto(proto: Any) -> Height:
        return Height(proto.revision_number, proto.revision_height)

    def to_proto(self) -> Any:
        return protos.Height(
            revision_number=self.revision_number,
            revision_height=self.revision_height,
        )


def _height_from_data(data: Optional[Dict[str, str]]) -> Optional[Height]:
    return Height.from_data(data) if data is not None else None


def _height_to_data(height: Optional[Height]) -> Optional[Dict[str, str]]:
    return height.to_data() if height is not None else None


def _height_from_proto(proto: Any, field: str) -> Optional[Height]:
    return Height.from_proto(getattr(proto, field)) if proto.HasField(field) else None


def _height_to_proto(height: Optional[Height]) -> Optional[Any]:
    return height.to_proto() if height is not None else None


class Packet:
    sequence: int
    source_port: str
    source_channel: str
    destination_port: str
    destination_channel: str
    data: str
    timeout_height: Optional[Height]
    timeout_timestamp: int

    def __init__(
        self,
        sequence: int,
        source_port: str,
        source_channel: str,
        destination_port: str,
        destination_channel: str,
        data: str,
        timeout_height: Optional[Height],
        timeout_timestamp: int,
    ):
        self.sequence = sequence
        self.source_port = source_port
        self.source_channel = source_channel
        self.destination_port = destination_port
        self.destination_channel = destination_channel
        self.data = data
        self.timeout_height = timeout_height
        self.timeout_timestamp = timeout_timestamp

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Packet):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Packet:
        return Packet(
            parse_optional_uint64(data.get("sequence"), "sequence"),
            data["source_port"],
            data["source_channel"],
            data["destination_port"],
            data["destination_channel"],
            data.get("data") or "",
            _height_from_data(data.get("timeout_height")),
            parse_optional_uint64(data.get("timeout_timestamp"), "timeout_timestamp"),
        )

    def to_data(self) -> Dict[str, Any]:
        return {
            "sequence": str(self.sequence),
            "source_port": self.source_port,
            "source_channel": self.source_channel,
            "destination_port": self.destination_port,
            "destination_channel": self.destination_channel,
            "data": self.data,
            "timeout_height": _height_to_data(self.timeout_height),
            "timeout_timestamp": str(self.timeout_timestamp),
        }

    @staticmethod
    def from_proto(proto: Any) -> Packet:
        return Packet(
            proto.sequence,
            proto.source_port,
            proto.source_channel,
            proto.destination_port,
            proto.destination_channel,
            b64encode(proto.data),
            _height_from_proto(proto, "timeout_height"),
            proto.timeout_timestamp,
        )

    def to_proto(self) -> Any:
        return protos.new(
            protos.message_class("ibc.core.channel.v1.Packet"),
            sequence=self.sequence,
            source_port=self.source_port,
            source_channel=self.source_channel,
            destination_port=self.destination_port,
            destination_channel=self.destination_channel,
            data=b64decode(self.data),
            timeout_height=_height_to_proto(self.timeout_height),
            timeout_timestamp=self.timeout_timestamp,
        )


def _packet_from_proto(proto: Any) -> Optional[Packet]:
    return Packet.from_proto(proto.packet) if proto.HasField("packet") else None


class MerklePrefix:
    key_prefix: str

    def __init__(self, key_prefix: str):
        self.key_prefix = key_prefix

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MerklePrefix):
            return NotImplemented
        return self.key_prefix == other.key_prefix

    @staticmethod
    def from_data(data: Dict[str, str]) -> MerklePrefix:
        return MerklePrefix(data.get("key_prefix") or "")

    def to_data(self) -> Dict[str, str]:
        return {"key_prefix": self.key_prefix}

    @staticmethod
    def from_proto(proto: Any) -> MerklePrefix:
        return MerklePrefix(b64encode(proto.key_prefix))

    def to_proto(self) -> Any:
        return protos.new(
            protos.message_class("ibc.core.commitment.v1.MerklePrefix"),
            key_prefix=b64decode(self.key_prefix),
        )


class Counterparty:
    """The connection end on the other chain."""

    client_id: str
    connection_id: str
    prefix: Optional[MerklePrefix]

    def __init__(
        self, client_id: str, connection_id: str, prefix: Optional[MerklePrefix] = None
    ):
        self.client_id = client_id
        self.connection_id = connection_id
        self.prefix = prefix

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Counterparty):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Counterparty:
        prefix = data.get("prefix")
        return Counterparty(
            data["client_id"],
            data.get("connection_id") or "",
            MerklePrefix.from_data(prefix) if prefix is not None else None,
        )

    def to_data(self) -> Dict[str, Any]:
        return {
            "client_id": self.client_id,
            "connection_id": self.connection_id,
            "prefix": self.prefix.to_data() if self.prefix is not None else None,
        }

    @staticmethod
    def from_proto(proto: Any) -> Counterparty:
        return Counterparty(
            proto.client_id,
            proto.connection_id,
            MerklePrefix.from_proto(proto.prefix) if proto.HasField("prefix") else None,
        )

    def to_proto(self) -> Any:
        return protos.new(
            protos.message_class("ibc.core.connection.v1.Counterparty"),
            client_id=self.client_id,
            connection_id=self.connection_id,
            prefix=self.prefix.to_proto() if self.prefix is not None else None,
        )


class Version:
    identifier: str
    features: List[str]

    def __init__(self, identifier: str, features: List[str]):
        self.identifier = identifier
        self.features = list(features)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.identifier == other.identifier and self.features == other.features

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Version:
        return Version(data["identifier"], data.get("features") or [])

    def to_data(self) -> Dict[str, Any]:
        return {"identifier": self.identifier, "features": list(self.features)}

    @staticmethod
    def from_proto(proto: Any) -> Version:
        return Version(proto.identifier, list(proto.features))

    def to_proto(self) -> Any:
        return protos.new(
            protos.message_class("ibc.core.connection.v1.Version"),
            identifier=self.identifier,
            features=self.features,
        )


class MsgChannelCloseInit(Msg):
    """Closes a channel end on the signer's chain."""

    TYPE_URL = "/ibc.core.channel.v1.MsgChannelCloseInit"

    port_id: str
    channel_id: str
    signer: str

    def __init__(self, port_id: str, channel_id: str, signer: str):
        self.port_id = port_id
        self.channel_id = channel_id
        self.signer = signer

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgChannelCloseInit:
        return MsgChannelCloseInit(data["port_id"], data["channel_id"], data["signer"])

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "port_id": self.port_id,
            "channel_id": self.channel_id,
            "signer": self.signer,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgChannelCloseInit:
        return MsgChannelCloseInit(proto.port_id, proto.channel_id, proto.signer)

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            port_id=self.port_id,
            channel_id=self.channel_id,
            signer=self.signer,
        )


class MsgChannelCloseConfirm(Msg):
    """
    Acknowledges on chain B that the counterparty channel end on chain A was closed. proof_init is
    the base64 encoded proof of that closure.
    """

    TYPE_URL = "/ibc.core.channel.v1.MsgChannelCloseConfirm"

    port_id: str
    channel_id: str
    proof_init: str
    proof_height: Optional[Height]
    signer: str

    def __init__(
        self,
        port_id: str,
        channel_id: str,
        proof_init: str,
        proof_height: Optional[Height],
        signer: str,
    ):
        self.port_id = port_id
        self.channel_id = channel_id
        self.proof_init = proof_init
        self.proof_height = proof_height
        self.signer = signer

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgChannelCloseConfirm:
        return MsgChannelCloseConfirm(
            data["port_id"],
            data["channel_id"],
            data.get("proof_init") or "",
            _height_from_data(data.get("proof_height")),
            data["signer"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "port_id": self.port_id,
            "channel_id": self.channel_id,
            "proof_init": self.proof_init,
            "proof_height": _height_to_data(self.proof_height),
            "signer": self.signer,
        }

    @classmethod
    def from_proto(
        cls, proto: Any, is_classic: bool = False
    ) -> MsgChannelCloseConfirm:
        return MsgChannelCloseConfirm(
            proto.port_id,
            proto.channel_id,
            b64encode(proto.proof_init),
            _height_from_proto(proto, "proof_height"),
            proto.signer,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            port_id=self.port_id,
            channel_id=self.channel_id,
            proof_init=b64decode(self.proof_init),
            proof_height=_height_to_proto(self.proof_height),
            signer=self.signer,
        )


class MsgTimeout(Msg):
    """Receives a packet that timed out on the destination chain."""

    TYPE_URL = "/ibc.core.channel.v1.MsgTimeout"

    packet: Optional[Packet]
    proof_unreceived: str
    proof_height: Optional[Height]
    next_sequence_recv: int
    signer: str

    def __init__(
        self,
        packet: Optional[Packet],
        proof_unreceived: str,
        proof_height: Optional[Height],
        next_sequence_recv: int,
        signer: str,
    ):
        self.packet = packet
        self.proof_unreceived = proof_unreceived
        self.proof_height = proof_height
        self.next_sequence_recv = next_sequence_recv
        self.signer = signer

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> MsgTimeout:
        packet = data.get("packet")
        return MsgTimeout(
            Packet.from_data(packet) if packet is not None else None,
            data.get("proof_unreceived") or "",
            _height_from_data(data.get("proof_height")),
            parse_optional_uint64(data.get("next_sequence_recv"), "next_sequence_recv"),
            data["signer"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "packet": self.packet.to_data() if self.packet is not None else None,
            "proof_unreceived": self.proof_unreceived,
            "proof_height": _height_to_data(self.proof_height),
            "next_sequence_recv": str(self.next_sequence_recv),
            "signer": self.signer,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgTimeout:
        return MsgTimeout(
            _packet_from_proto(proto),
            b64encode(proto.proof_unreceived),
            _height_from_proto(proto, "proof_height"),
            proto.next_sequence_recv,
            proto.signer,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            packet=self.packet.to_proto() if self.packet is not None else None,
            proof_unreceived=b64decode(self.proof_unreceived),
            proof_height=_height_to_proto(self.proof_height),
            next_sequence_recv=self.next_sequence_recv,
            signer=self.signer,
        )


class MsgTimeoutOnClose(Msg):
    """Times out a packet because the counterparty channel end was closed."""

    TYPE_URL = "/ibc.core.channel.v1.MsgTimeoutOnClose"

    packet: Optional[Packet]
    proof_unreceived: str
    proof_close: str
    proof_height: Optional[Height]
    next_sequence_recv: int
    signer: str

    def __init__(
        self,
        packet: Optional[Packet],
        proof_unreceived: str,
        proof_close: str,
        proof_height: Optional[Height],
        next_sequence_recv: int,
        signer: str,
    ):
        self.packet = packet
        self.proof_unreceived = proof_unreceived
        self.proof_close = proof_close
        self.proof_height = proof_height
        self.next_sequence_recv = next_sequence_recv
        self.signer = signer

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgTimeoutOnClose:
        packet = data.get("packet")
        return MsgTimeoutOnClose(
            Packet.from_data(packet) if packet is not None else None,
            data.get("proof_unreceived") or "",
            data.get("proof_close") or "",
            _height_from_data(data.get("proof_height")),
            parse_optional_uint64(data.get("next_sequence_recv"), "next_sequence_recv"),
            data["signer"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "packet": self.packet.to_data() if self.packet is not None else None,
            "proof_unreceived": self.proof_unreceived,
            "proof_close": self.proof_close,
            "proof_height": _height_to_data(self.proof_height),
            "next_sequence_recv": str(self.next_sequence_recv),
            "signer": self.signer,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgTimeoutOnClose:
        return MsgTimeoutOnClose(
            _packet_from_proto(proto),
            b64encode(proto.proof_unreceived),
            b64encode(proto.proof_close),
            _height_from_proto(proto, "proof_height"),
            proto.next_sequence_recv,
            proto.signer,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            packet=self.packet.to_proto() if self.packet is not None else None,
            proof_unreceived=b64decode(self.proof_unreceived),
            proof_close=b64decode(self.proof_close),
            proof_height=_height_to_proto(self.proof_height),
            next_sequence_recv=self.next_sequence_recv,
            signer=self.signer,
        )


class MsgConnectionOpenInit(Msg):
    """Sent by an account on chain A to start a connection handshake with chain B."""

    TYPE_URL = "/ibc.core.connection.v1.MsgConnectionOpenInit"

    client_id: str
    counterparty: Optional[Counterparty]
    version: Optional[Version]
    delay_period: int
    signer: str

    def __init__(
        self,
        client_id: str,
        counterparty: Optional[Counterparty],
        version: Optional[Version],
        delay_period: int,
        signer: str,
    ):
        self.client_id = client_id
        self.counterparty = counterparty
        self.version = version
        self.delay_period = delay_period
        self.signer = signer

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgConnectionOpenInit:
        counterparty = data.get("counterparty")
        version = data.get("version")
        return MsgConnectionOpenInit(
            data["client_id"],
            Counterparty.from_data(counterparty) if counterparty is not None else None,
            Version.from_data(version) if version is not None else None,
            parse_optional_uint64(data.get("delay_period"), "delay_period"),
            data["signer"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "client_id": self.client_id,
            "counterparty": self.counterparty.to_data()
            if self.counterparty is not None
            else None,
            "version": self.version.to_data() if self.version is not None else None,
            "delay_period": str(self.delay_period),
            "signer": self.signer,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgConnectionOpenInit:
        return MsgConnectionOpenInit(
            proto.client_id,
            Counterparty.from_proto(proto.counterparty)
            if proto.HasField("counterparty")
            else None,
            Version.from_proto(proto.version) if proto.HasField("version") else None,
            proto.delay_period,
            proto.signer,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            client_id=self.client_id,
            counterparty=self.counterparty.to_proto()
            if self.counterparty is not None
            else None,
            version=self.version.to_proto() if self.version is not None else None,
            delay_period=self.delay_period,
            signer=self.signer,
        )


class ClientUpdateProposal(Msg):
    """
    Governance proposal to update an IBC client. If it passes, the substitute client's latest
    consensus state is copied over to the subject client.
    """

    TYPE_URL = "/ibc.core.client.v1.ClientUpdateProposal"
    AMINO_TYPES = ("ibc/ClientUpdateProposal", "ibc/ClientUpdateProposal")

    title: str
    description: str
    subject_client_id: str
    substitute_client_id: str

    def __init__(
        self,
        title: str,
        description: str,
        subject_client_id: str,
        substitute_client_id: str,
    ):
        self.title = title
        self.description = description
        self.subject_client_id = subject_client_id
        self.substitute_client_id = substitute_client_id

    @classmethod
    def _from_amino_value(
        cls, value: Dict[str, Any], is_classic: bool
    ) -> ClientUpdateProposal:
        return cls.from_data(value, is_classic)

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        value = self.to_data(is_classic)
        del value["@type"]
        return value

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> ClientUpdateProposal:
        return ClientUpdateProposal(
            data["title"],
            data["description"],
            data["subject_client_id"],
            data["substitute_client_id"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "title": self.title,
            "description": self.description,
            "subject_client_id": self.subject_client_id,
            "substitute_client_id": self.substitute_client_id,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> ClientUpdateProposal:
        return ClientUpdateProposal(
            proto.title,
            proto.description,
            proto.subject_client_id,
            proto.substitute_client_id,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.new(
            self.proto_class(),
            title=self.title,
            description=self.description,
            subject_client_id=self.subject_client_id,
            substitute_client_id=self.substitute_client_id,
        )


class Test(unittest.TestCase):
    signer = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"

    def packet(self, timeout_height: Optional[Height] = None) -> Packet:
        return Packet(
            7,
            "transfer",
            "channel-0",
            "transfer",
            "channel-12",
            "eyJhbW91bnQiOiIxIn0=",
            timeout_height,
            1700000000000000000,
        )

    def test_amino_unsupported(self):
        msg = MsgChannelCloseInit("transfer", "channel-0", self.signer)
        with self.assertRaises(UnsupportedRepresentationError):
            msg.to_amino()
        with self.assertRaises(UnsupportedRepresentationError):
            MsgChannelCloseInit.from_amino({"type": "", "value": {}})
        with self.assertRaises(UnsupportedRepresentationError):
            MsgTimeout(None, "", None, 0, self.signer).to_amino(True)

    def test_close_init(self):
        msg = MsgChannelCloseInit("transfer", "channel-0", self.signer)
        self.assertEqual(MsgChannelCloseInit.from_data(msg.to_data()), msg)
        self.assertEqual(MsgChannelCloseInit.unpack_any(msg.pack_any()), msg)

    def test_close_confirm_optional_height(self):
        msg = MsgChannelCloseConfirm("transfer", "channel-0", "", None, self.signer)
        self.assertIsNone(MsgChannelCloseConfirm.from_proto(msg.to_proto()).proof_height)
        self.assertEqual(MsgChannelCloseConfirm.from_proto(msg.to_proto()), msg)
        self.assertEqual(MsgChannelCloseConfirm.from_data(msg.to_data()), msg)

        msg = MsgChannelCloseConfirm(
            "transfer", "channel-0", "cHJvb2Y=", Height(1, 100), self.signer
        )
        self.assertEqual(msg.to_proto().proof_init, b"proof")
        self.assertEqual(MsgChannelCloseConfirm.from_proto(msg.to_proto()), msg)
        self.assertEqual(
            msg.to_data()["proof_height"],
            {"revision_number": "1", "revision_height": "100"},
        )

    def test_timeout(self):
        msg = MsgTimeout(self.packet(Height(0, 5)), "cHJvb2Y=", Height(1, 2), 9, self.signer)
        self.assertEqual(MsgTimeout.from_proto(msg.to_proto()), msg)
        self.assertEqual(MsgTimeout.from_data(msg.to_data()), msg)
        self.assertEqual(msg.to_data()["next_sequence_recv"], "9")

        empty = MsgTimeout(None, "", None, 0, self.signer)
        self.assertEqual(MsgTimeout.from_proto(empty.to_proto()), empty)
        self.assertEqual(MsgTimeout.from_data(empty.to_data()), empty)

    def test_timeout_on_close(self):
        msg = MsgTimeoutOnClose(
            self.packet(), "dW5yZWNlaXZlZA==", "Y2xvc2U=", Height(1, 2), 3, self.signer
        )
        decoded = MsgTimeoutOnClose.from_proto(msg.to_proto())
        self.assertEqual(decoded, msg)
        self.assertEqual(decoded.proof_unreceived, "dW5yZWNlaXZlZA==")
        self.assertEqual(decoded.proof_close, "Y2xvc2U=")
        self.assertEqual(MsgTimeoutOnClose.from_data(msg.to_data()), msg)

    def test_connection_open_init(self):
        msg = MsgConnectionOpenInit(
            "07-tendermint-0",
            Counterparty("07-tendermint-1", "", MerklePrefix("aWJj")),
            Version("1", ["ORDER_ORDERED", "ORDER_UNORDERED"]),
            0,
            self.signer,
        )
        self.assertEqual(MsgConnectionOpenInit.from_proto(msg.to_proto()), msg)
        self.assertEqual(MsgConnectionOpenInit.from_data(msg.to_data()), msg)
        self.assertEqual(MsgConnectionOpenInit.unpack_any(msg.pack_any()), msg)

        bare = MsgConnectionOpenInit("07-tendermint-0", None, None, 10, self.signer)
        self.assertEqual(MsgConnectionOpenInit.from_proto(bare.to_proto()), bare)

    def test_client_update_proposal(self):
        proposal = ClientUpdateProposal("title", "description", "07-tm-0", "07-tm-1")
        amino = proposal.to_amino(True)
        self.assertEqual(amino["type"], "ibc/ClientUpdateProposal")
        self.assertEqual(amino, proposal.to_amino(False))
        self.assertNotIn("@type", amino["value"])
        self.assertEqual(ClientUpdateProposal.from_amino(amino), proposal)
        self.assertEqual(ClientUpdateProposal.from_data(proposal.to_data()), proposal)
        self.assertEqual(ClientUpdateProposal.unpack_any(proposal.pack_any()), proposal)


if __name__ == "__main__":
    unittest.main()
