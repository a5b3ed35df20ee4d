# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
The transaction model: a body of messages, the authorization info (signer infos and fee) and the
signatures. Signatures are base64 strings aligned one to one with the signer infos.
"""

from __future__ import annotations

import enum
import unittest
from typing import Any, Dict, List, Optional

from . import msgs, protos
from . import public_key as public_keys
from .bank import MsgSend
from .coins import Coins, CoinsInput
from .msg import Msg, b64decode, b64encode
from .numeric import parse_optional_uint64
from .public_key import PublicKey, SimplePublicKey


class SignMode(enum.IntEnum):
    SIGN_MODE_UNSPECIFIED = 0
    SIGN_MODE_DIRECT = 1
    SIGN_MODE_TEXTUAL = 2
    SIGN_MODE_LEGACY_AMINO_JSON = 127


class Fee:
    """Gas limit plus the coins paid for it. A zero gas limit with a non-zero amount is allowed."""

    gas_limit: int
    amount: Coins
    payer: str
    granter: str

    def __init__(
        self,
        gas_limit: int,
        amount: CoinsInput,
        payer: str = "",
        granter: str = "",
    ):
        if isinstance(gas_limit, bool) or not isinstance(gas_limit, int):
            raise ValueError(f"Gas limit must be an integer, got {gas_limit!r}")
        if gas_limit < 0:
            raise ValueError(f"Gas limit must not be negative, got {gas_limit}")
        self.gas_limit = gas_limit
        self.amount = Coins(amount)
        for coin in self.amount:
            if not coin.is_int_coin() or coin.amount < 0:
                raise ValueError(f"Fee amounts must be non-negative integers, got {coin}")
        self.payer = payer
        self.granter = granter

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fee):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"Fee({self.gas_limit}, {str(self.amount)!r})"

    @staticmethod
    def from_amino(data: Dict[str, Any]) -> Fee:
        return Fee(
            parse_optional_uint64(data.get("gas"), "gas"),
            Coins.from_amino(data.get("amount")),
        )

    def to_amino(self) -> Dict[str, Any]:
        return {"amount": self.amount.to_amino(), "gas": str(self.gas_limit)}

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Fee:
        return Fee(
            parse_optional_uint64(data.get("gas_limit"), "gas_limit"),
            Coins.from_data(data.get("amount")),
            data.get("payer") or "",
            data.get("granter") or "",
        )

    def to_data(self) -> Dict[str, Any]:
        return {
            "amount": self.amount.to_data(),
            "gas_limit": str(self.gas_limit),
            "payer": self.payer,
            "granter": self.granter,
        }

    @staticmethod
    def from_proto(proto: Any) -> Fee:
        return Fee(
            proto.gas_limit,
            Coins.from_proto(proto.amount),
            proto.payer,
            proto.granter,
        )

    def to_proto(self) -> Any:
        return protos.Fee(
            amount=self.amount.to_proto(),
            gas_limit=self.gas_limit,
            payer=self.payer,
            granter=self.granter,
        )


class SignerInfo:
    public_key: PublicKey
    sequence: int
    mode: SignMode

    def __init__(
        self,
        public_key: PublicKey,
        sequence: int,
        mode: SignMode = SignMode.SIGN_MODE_DIRECT,
    ):
        self.public_key = public_key
        self.sequence = sequence
        self.mode = mode

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignerInfo):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"SignerInfo({self.public_key!r}, {self.sequence}, {self.mode.name})"

    @staticmethod
    def from_data(data: Dict[str, Any]) -> SignerInfo:
        return SignerInfo(
            public_keys.from_data(data["public_key"]),
            parse_optional_uint64(data.get("sequence"), "sequence"),
            SignMode[data["mode_info"]["single"]["mode"]],
        )

    def to_data(self) -> Dict[str, Any]:
        return {
            "public_key": self.public_key.to_data(),
            "mode_info": {"single": {"mode": self.mode.name}},
            "sequence": str(self.sequence),
        }

    @staticmethod
    def from_proto(proto: Any) -> SignerInfo:
        return SignerInfo(
            public_keys.unpack_any(proto.public_key),
            proto.sequence,
            SignMode(proto.mode_info.single.mode),
        )

    def to_proto(self) -> Any:
        return protos.SignerInfo(
            public_key=self.public_key.pack_any(),
            mode_info=protos.ModeInfo(single=protos.ModeInfo.Single(mode=self.mode)),
            sequence=self.sequence,
        )


class AuthInfo:
    signer_infos: List[SignerInfo]
    fee: Fee

    def __init__(self, signer_infos: List[SignerInfo], fee: Fee):
        self.signer_infos = list(signer_infos)
        self.fee = fee

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthInfo):
            return NotImplemented
        return self.signer_infos == other.signer_infos and self.fee == other.fee

    @staticmethod
    def from_data(data: Dict[str, Any]) -> AuthInfo:
        return AuthInfo(
            [SignerInfo.from_data(info) for info in data.get("signer_infos") or []],
            Fee.from_data(data["fee"]),
        )

    def to_data(self) -> Dict[str, Any]:
        return {
            "signer_infos": [info.to_data() for info in self.signer_infos],
            "fee": self.fee.to_data(),
        }

    @staticmethod
    def from_proto(proto: Any) -> AuthInfo:
        return AuthInfo(
            [SignerInfo.from_proto(info) for info in proto.signer_infos],
            Fee.from_proto(proto.fee),
        )

    def to_proto(self) -> Any:
        return protos.AuthInfo(
            signer_infos=[info.to_proto() for info in self.signer_infos],
            fee=self.fee.to_proto(),
        )


class TxBody:
    messages: List[Msg]
    memo: str
    timeout_height: int

    def __init__(self, messages: List[Msg], memo: str = "", timeout_height: int = 0):
        self.messages = list(messages)
        self.memo = memo
        self.timeout_height = timeout_height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TxBody):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any], is_classic: bool = False) -> TxBody:
        return TxBody(
            [
                msgs.from_data(msg, is_classic, strict=False)
                for msg in data.get("messages") or []
            ],
            data.get("memo") or "",
            parse_optional_uint64(data.get("timeout_height"), "timeout_height"),
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "messages": [msg.to_data(is_classic) for msg in self.messages],
            "memo": self.memo,
            "timeout_height": str(self.timeout_height),
        }

    @staticmethod
    def from_proto(proto: Any, is_classic: bool = False) -> TxBody:
        return TxBody(
            [msgs.unpack_any(msg, is_classic, strict=False) for msg in proto.messages],
            proto.memo,
            proto.timeout_height,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return protos.TxBody(
            messages=[msg.pack_any(is_classic) for msg in self.messages],
            memo=self.memo,
            timeout_height=self.timeout_height,
        )


class SignerData:
    """The account state a signature is bound to."""

    sequence_number: int
    public_key: Optional[PublicKey]

    def __init__(self, sequence_number: int, public_key: Optional[PublicKey] = None):
        self.sequence_number = sequence_number
        self.public_key = public_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignerData):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"SignerData({self.sequence_number}, {self.public_key!r})"


class SignerOptions:
    """A signer as the caller knows it. Missing fields are read from the chain."""

    address: str
    sequence_number: Optional[int]
    public_key: Optional[PublicKey]

    def __init__(
        self,
        address: str,
        sequence_number: Optional[int] = None,
        public_key: Optional[PublicKey] = None,
    ):
        self.address = address
        self.sequence_number = sequence_number
        self.public_key = public_key


class Tx:
    body: TxBody
    auth_info: AuthInfo
    signatures: List[str]

    def __init__(self, body: TxBody, auth_info: AuthInfo, signatures: List[str]):
        self.body = body
        self.auth_info = auth_info
        self.signatures = list(signatures)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tx):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return (
            f"Tx(messages={len(self.body.messages)}, "
            f"signers={len(self.auth_info.signer_infos)}, "
            f"signatures={len(self.signatures)})"
        )

    def append_signature(self, signer_info: SignerInfo, signature: str):
        """Adds a signer and its signature together so both lists stay aligned."""
        self.auth_info.signer_infos.append(signer_info)
        self.signatures.append(signature)

    def append_empty_signatures(self, signers: List[SignerData]):
        """
        Adds a placeholder signer info and an empty signature per signer. Nodes accept these when
        simulating, which only needs the signer count and sequence numbers.
        """
        for signer in signers:
            public_key = signer.public_key or SimplePublicKey("")
            self.append_signature(
                SignerInfo(public_key, signer.sequence_number, SignMode.SIGN_MODE_DIRECT),
                "",
            )

    @staticmethod
    def from_data(data: Dict[str, Any], is_classic: bool = False) -> Tx:
        return Tx(
            TxBody.from_data(data["body"], is_classic),
            AuthInfo.from_data(data["auth_info"]),
            data.get("signatures") or [],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "body": self.body.to_data(is_classic),
            "auth_info": self.auth_info.to_data(),
            "signatures": list(self.signatures),
        }

    @staticmethod
    def from_proto(proto: Any, is_classic: bool = False) -> Tx:
        return Tx(
            TxBody.from_proto(proto.body, is_classic),
            AuthInfo.from_proto(proto.auth_info),
            [b64encode(signature) for signature in proto.signatures],
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        signer_count = len(self.auth_info.signer_infos)
        if len(self.signatures) != signer_count:
            raise ValueError(
                f"{len(self.signatures)} signatures do not match {signer_count} signers"
            )
        return protos.Tx(
            body=self.body.to_proto(is_classic),
            auth_info=self.auth_info.to_proto(),
            signatures=[b64decode(signature) for signature in self.signatures],
        )

    @staticmethod
    def from_bytes(value: bytes, is_classic: bool = False) -> Tx:
        return Tx.from_proto(protos.Tx.FromString(value), is_classic)

    def to_bytes(self, is_classic: bool = False) -> bytes:
        return self.to_proto(is_classic).SerializeToString()


class Test(unittest.TestCase):
    sender = "xpla1y4umfuqfg76t8mfcff6zzx7elvy93jtp4xcdvw"
    key = "AjszqFJDRAYbEjZMuiD+ChqzbUSGq/RRu3zr0R6iJB5b"

    def unsigned(self) -> Tx:
        return Tx(
            TxBody([MsgSend(self.sender, self.sender, "1axpla")], "memo", 100),
            AuthInfo([], Fee(200000, "1700000000000000axpla")),
            [],
        )

    def test_negative_gas(self):
        with self.assertRaises(ValueError):
            Fee(-1, "1axpla")
        with self.assertRaises(ValueError):
            Fee("100", "1axpla")  # type: ignore
        with self.assertRaises(ValueError):
            Fee(1.5, "1axpla")  # type: ignore
        self.assertEqual(Fee(0, "1axpla").gas_limit, 0)

    def test_fee_amounts(self):
        with self.assertRaises(ValueError):
            Fee(100, "-5axpla")
        with self.assertRaises(ValueError):
            Fee(100, "0.5axpla")
        with self.assertRaises(ValueError):
            Fee(100, "1axpla,-1uatom")
        self.assertEqual(Fee(100, "0axpla").amount, Coins("0axpla"))
        self.assertEqual(Fee(100, Coins("0.5axpla").mul(3).to_int_ceil_coins()).amount, Coins("2axpla"))

    def test_fee_codecs(self):
        fee = Fee(100, "10axpla", "payer", "granter")
        self.assertEqual(Fee.from_data(fee.to_data()), fee)
        self.assertEqual(Fee.from_proto(fee.to_proto()), fee)
        self.assertEqual(
            fee.to_amino(),
            {"amount": [{"denom": "axpla", "amount": "10"}], "gas": "100"},
        )

    def test_unsigned_round_trip(self):
        tx = self.unsigned()
        self.assertEqual(Tx.from_bytes(tx.to_bytes()), tx)
        self.assertEqual(Tx.from_data(tx.to_data()), tx)
        self.assertEqual(tx.signatures, [])

    def test_empty_signatures(self):
        tx = self.unsigned()
        tx.append_empty_signatures(
            [SignerData(3, SimplePublicKey(self.key)), SignerData(4)]
        )
        self.assertEqual(tx.signatures, ["", ""])
        self.assertEqual(tx.auth_info.signer_infos[1].public_key, SimplePublicKey(""))
        self.assertEqual(tx.auth_info.signer_infos[0].sequence, 3)

        decoded = Tx.from_bytes(tx.to_bytes())
        self.assertEqual(decoded, tx)
        self.assertEqual(
            decoded.to_data()["auth_info"]["signer_infos"][0]["mode_info"],
            {"single": {"mode": "SIGN_MODE_DIRECT"}},
        )

    def test_signature_alignment(self):
        tx = self.unsigned()
        tx.append_signature(SignerInfo(SimplePublicKey(self.key), 1), "c2lnbmF0dXJl")
        self.assertEqual(Tx.from_bytes(tx.to_bytes()).signatures, ["c2lnbmF0dXJl"])

        tx.signatures.append("ZXh0cmE=")
        with self.assertRaises(ValueError):
            tx.to_bytes()

        orphan = self.unsigned()
        orphan.signatures.append("c2lnbmF0dXJl")
        with self.assertRaises(ValueError):
            orphan.to_bytes()

        unsigned = self.unsigned()
        unsigned.auth_info.signer_infos.append(SignerInfo(SimplePublicKey(self.key), 1))
        with self.assertRaises(ValueError):
            unsigned.to_bytes()

    def test_classic_flag_does_not_change_bytes(self):
        tx = self.unsigned()
        self.assertEqual(tx.to_bytes(True), tx.to_bytes(False))


if __name__ == "__main__":
    unittest.main()
