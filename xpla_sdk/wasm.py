# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import unittest
from typing import Any, Dict, Optional, Union

from .coins import Coins, CoinsInput
from .msg import Msg
from .numeric import parse_uint64

# A contract message is either a JSON object or a bare string.
ContractMsg = Union[Dict[str, Any], str]


def _encode_contract_msg(value: ContractMsg) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode()


def _decode_contract_msg(value: bytes) -> ContractMsg:
    return json.loads(value.decode())


class MsgInstantiateContract(Msg):
    """
    Creates a new contract instance from uploaded code. The admin, if any, may migrate the
    contract later; without one the contract is immutable.
    """

    TYPE_URL = "/cosmwasm.wasm.v1.MsgInstantiateContract"
    AMINO_TYPES = ("wasm/MsgInstantiateContract", "wasm/MsgInstantiateContract")

    sender: str
    admin: Optional[str]
    code_id: int
    init_msg: ContractMsg
    funds: Coins
    label: str

    def __init__(
        self,
        sender: str,
        admin: Optional[str],
        code_id: int,
        init_msg: ContractMsg,
        funds: CoinsInput = None,
        label: str = "",
    ):
        self.sender = sender
        self.admin = admin
        self.code_id = code_id
        self.init_msg = init_msg
        self.funds = Coins(funds)
        self.label = label

    @classmethod
    def _from_amino_value(
        cls, value: Dict[str, Any], is_classic: bool
    ) -> MsgInstantiateContract:
        return MsgInstantiateContract(
            value["sender"],
            value.get("admin") or None,
            parse_uint64(value["code_id"], "code_id"),
            value["msg"],
            Coins.from_amino(value.get("funds")),
            value.get("label") or "",
        )

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        value: Dict[str, Any] = {
            "sender": self.sender,
            "code_id": str(self.code_id),
            "label": self.label,
            "msg": self.init_msg,
            "funds": self.funds.to_amino(),
        }
        if self.admin:
            value["admin"] = self.admin
        return value

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgInstantiateContract:
        return MsgInstantiateContract(
            data["sender"],
            data.get("admin") or None,
            parse_uint64(data["code_id"], "code_id"),
            data["msg"],
            Coins.from_data(data.get("funds")),
            data.get("label") or "",
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "sender": self.sender,
            "admin": self.admin or "",
            "code_id": str(self.code_id),
            "label": self.label,
            "msg": self.init_msg,
            "funds": self.funds.to_data(),
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgInstantiateContract:
        return MsgInstantiateContract(
            proto.sender,
            proto.admin or None,
            proto.code_id,
            _decode_contract_msg(proto.msg),
            Coins.from_proto(proto.funds),
            proto.label,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            sender=self.sender,
            admin=self.admin or "",
            code_id=self.code_id,
            label=self.label,
            msg=_encode_contract_msg(self.init_msg),
            funds=self.funds.to_proto(),
        )


class MsgExecuteContract(Msg):
    """Calls a contract's execute entry point, optionally sending funds along."""

    TYPE_URL = "/cosmwasm.wasm.v1.MsgExecuteContract"
    AMINO_TYPES = ("wasm/MsgExecuteContract", "wasm/MsgExecuteContract")

    sender: str
    contract: str
    execute_msg: ContractMsg
    funds: Coins

    def __init__(
        self,
        sender: str,
        contract: str,
        execute_msg: ContractMsg,
        funds: CoinsInput = None,
    ):
        self.sender = sender
        self.contract = contract
        self.execute_msg = execute_msg
        self.funds = Coins(funds)

    @classmethod
    def _from_amino_value(
        cls, value: Dict[str, Any], is_classic: bool
    ) -> MsgExecuteContract:
        return cls.from_data(value, is_classic)

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "contract": self.contract,
            "msg": self.execute_msg,
            "funds": self.funds.to_amino(),
        }

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgExecuteContract:
        return MsgExecuteContract(
            data["sender"],
            data["contract"],
            data["msg"],
            Coins.from_data(data.get("funds")),
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {"@type": self.TYPE_URL, **self._amino_value(is_classic)}

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgExecuteContract:
        return MsgExecuteContract(
            proto.sender,
            proto.contract,
            _decode_contract_msg(proto.msg),
            Coins.from_proto(proto.funds),
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            sender=self.sender,
            contract=self.contract,
            msg=_encode_contract_msg(self.execute_msg),
            funds=self.funds.to_proto(),
        )


class Test(unittest.TestCase):
    sender = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"

    def test_admin(self):
        with_admin = MsgInstantiateContract(
            self.sender, self.sender, 1, {"count": 0}, {"axpla": 120400}
        )
        self.assertEqual(with_admin.to_amino()["value"]["admin"], self.sender)
        self.assertEqual(with_admin.to_proto().admin, self.sender)
        self.assertEqual(with_admin.to_data()["admin"], self.sender)

        without_admin = MsgInstantiateContract(
            self.sender, None, 1, {"count": 0}, {"axpla": 120400}
        )
        self.assertNotIn("admin", without_admin.to_amino()["value"])
        self.assertEqual(without_admin.to_proto().admin, "")
        self.assertEqual(without_admin.to_data()["admin"], "")

        for msg in [with_admin, without_admin]:
            self.assertEqual(MsgInstantiateContract.from_amino(msg.to_amino()), msg)
            self.assertEqual(MsgInstantiateContract.from_data(msg.to_data()), msg)
            self.assertEqual(MsgInstantiateContract.from_proto(msg.to_proto()), msg)

    def test_init_msg_as_string(self):
        msg = MsgInstantiateContract(self.sender, None, 1, "init_msg_as_string")
        self.assertEqual(msg.to_proto().msg, b'"init_msg_as_string"')
        self.assertEqual(msg.to_amino()["value"]["msg"], "init_msg_as_string")
        self.assertEqual(msg.to_data()["msg"], "init_msg_as_string")
        self.assertEqual(MsgInstantiateContract.unpack_any(msg.pack_any()), msg)

    def test_proto_json_bytes(self):
        msg = MsgInstantiateContract(self.sender, None, 1, {"count": 0})
        self.assertEqual(msg.to_proto().msg, b'{"count":0}')
        self.assertEqual(msg.to_proto().code_id, 1)

    def test_execute(self):
        msg = MsgExecuteContract(
            self.sender, self.sender, {"increment": {}}, "10axpla"
        )
        amino = msg.to_amino(True)
        self.assertEqual(amino["type"], "wasm/MsgExecuteContract")
        self.assertEqual(MsgExecuteContract.from_amino(amino, True), msg)
        self.assertEqual(MsgExecuteContract.from_data(msg.to_data()), msg)
        self.assertEqual(MsgExecuteContract.unpack_any(msg.pack_any()), msg)


if __name__ == "__main__":
    unittest.main()
