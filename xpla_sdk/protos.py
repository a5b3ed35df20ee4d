# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
Protobuf message classes for the Cosmos SDK, IBC and CosmWasm types this SDK speaks, taken from
the generated modules cosmpy ships. The ethermint key type is not among them and is described
here, in a private descriptor pool.
"""

from __future__ import annotations

import typing
import unittest
from typing import Dict

from cosmpy.protos.cosmos.bank.v1beta1 import tx_pb2 as bank_tx_pb2
from cosmpy.protos.cosmos.base.v1beta1 import coin_pb2
from cosmpy.protos.cosmos.crypto.secp256k1 import keys_pb2 as secp256k1_keys_pb2
from cosmpy.protos.cosmos.gov.v1beta1 import gov_pb2
from cosmpy.protos.cosmos.gov.v1beta1 import tx_pb2 as gov_tx_pb2
from cosmpy.protos.cosmos.staking.v1beta1 import tx_pb2 as staking_tx_pb2
from cosmpy.protos.cosmos.tx.v1beta1 import tx_pb2
from cosmpy.protos.cosmwasm.wasm.v1 import tx_pb2 as wasm_tx_pb2
from cosmpy.protos.ibc.core.channel.v1 import channel_pb2
from cosmpy.protos.ibc.core.channel.v1 import tx_pb2 as channel_tx_pb2
from cosmpy.protos.ibc.core.client.v1 import client_pb2
from cosmpy.protos.ibc.core.commitment.v1 import commitment_pb2
from cosmpy.protos.ibc.core.connection.v1 import connection_pb2
from cosmpy.protos.ibc.core.connection.v1 import tx_pb2 as connection_tx_pb2
from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

ETH_SECP256K1_PUB_KEY = "ethermint.crypto.v1.ethsecp256k1.PubKey"


def _ethermint_pool() -> descriptor_pool.DescriptorPool:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="ethermint/crypto/v1/ethsecp256k1/keys.proto",
        package="ethermint.crypto.v1.ethsecp256k1",
        syntax="proto3",
    )
    pub_key = file_proto.message_type.add(name="PubKey")
    pub_key.field.add(
        name="key",
        number=1,
        type=descriptor_pb2.FieldDescriptorProto.TYPE_BYTES,
        label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
    )
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return pool


EthSecp256k1PubKey = message_factory.GetMessageClass(
    _ethermint_pool().FindMessageTypeByName(ETH_SECP256K1_PUB_KEY)
)

Any = any_pb2.Any
Coin = coin_pb2.Coin
Height = client_pb2.Height
Tx = tx_pb2.Tx
TxBody = tx_pb2.TxBody
AuthInfo = tx_pb2.AuthInfo
SignerInfo = tx_pb2.SignerInfo
ModeInfo = tx_pb2.ModeInfo
Fee = tx_pb2.Fee

_CLASSES: Dict[str, typing.Type[Message]] = {
    message_type.DESCRIPTOR.full_name: message_type
    for message_type in [
        Coin,
        secp256k1_keys_pb2.PubKey,
        EthSecp256k1PubKey,
        bank_tx_pb2.MsgSend,
        staking_tx_pb2.MsgDelegate,
        staking_tx_pb2.MsgUndelegate,
        gov_pb2.TextProposal,
        gov_tx_pb2.MsgSubmitProposal,
        gov_tx_pb2.MsgDeposit,
        Height,
        client_pb2.ClientUpdateProposal,
        commitment_pb2.MerklePrefix,
        channel_pb2.Packet,
        channel_tx_pb2.MsgChannelCloseInit,
        channel_tx_pb2.MsgChannelCloseConfirm,
        channel_tx_pb2.MsgTimeout,
        channel_tx_pb2.MsgTimeoutOnClose,
        connection_pb2.Counterparty,
        connection_pb2.Version,
        connection_tx_pb2.MsgConnectionOpenInit,
        wasm_tx_pb2.MsgInstantiateContract,
        wasm_tx_pb2.MsgExecuteContract,
    ]
}


def message_class(full_name: str) -> typing.Type[Message]:
    """Returns the message class for a fully qualified protobuf name."""
    return _CLASSES[full_name]


def new(message_type: typing.Type[Message], **fields: typing.Any) -> Message:
    """Instantiates a message, leaving fields passed as None unset."""
    return message_type(**{key: value for (key, value) in fields.items() if value is not None})


def type_url_to_name(type_url: str) -> str:
    return type_url.split("/")[-1]


class Test(unittest.TestCase):
    def test_coin_wire_format(self):
        # field 1 (denom) "axpla", field 2 (amount) "10"
        coin = Coin(denom="axpla", amount="10")
        self.assertEqual(coin.SerializeToString(), b"\n\x05axpla\x12\x0210")

    def test_any_wire_format(self):
        envelope = Any(type_url="/a.B", value=b"\x01")
        self.assertEqual(envelope.SerializeToString(), b"\n\x04/a.B\x12\x01\x01")
        self.assertEqual(Any.FromString(envelope.SerializeToString()), envelope)

    def test_ethermint_key_matches_secp256k1_wire_format(self):
        key = b"\x02" * 33
        self.assertEqual(
            EthSecp256k1PubKey(key=key).SerializeToString(),
            message_class("cosmos.crypto.secp256k1.PubKey")(key=key).SerializeToString(),
        )
        self.assertEqual(
            EthSecp256k1PubKey.DESCRIPTOR.full_name, ETH_SECP256K1_PUB_KEY
        )

    def test_nested_presence(self):
        height = Height(revision_number=1, revision_height=2)
        msg = message_class("ibc.core.channel.v1.MsgChannelCloseConfirm")(
            port_id="transfer", proof_height=height
        )
        decoded = type(msg).FromString(msg.SerializeToString())
        self.assertTrue(decoded.HasField("proof_height"))
        self.assertFalse(type(msg)().HasField("proof_height"))

    def test_mode_info_single(self):
        mode_info = ModeInfo(single=ModeInfo.Single(mode=1))
        self.assertEqual(ModeInfo.FromString(mode_info.SerializeToString()).single.mode, 1)

    def test_type_url_to_name(self):
        self.assertEqual(
            type_url_to_name("/cosmos.bank.v1beta1.MsgSend"),
            "cosmos.bank.v1beta1.MsgSend",
        )

    def test_unknown_type(self):
        with self.assertRaises(KeyError):
            message_class("cosmos.bank.v1beta1.MsgNope")


if __name__ == "__main__":
    unittest.main()
