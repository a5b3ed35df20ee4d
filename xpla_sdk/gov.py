# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from typing import Any, Dict

from .coins import Coins, CoinsInput
from .msg import Msg
from .numeric import parse_uint64


class TextProposal(Msg):
    """
    Basic proposal which describes the candidate proposition that must be put into effect manually
    if passed. Used as a general-purpose way of discovering the community's sentiment.
    """

    TYPE_URL = "/cosmos.gov.v1beta1.TextProposal"
    AMINO_TYPES = ("gov/TextProposal", "cosmos-sdk/TextProposal")

    title: str
    description: str

    def __init__(self, title: str, description: str):
        self.title = title
        self.description = description

    @classmethod
    def _from_amino_value(cls, value: Dict[str, Any], is_classic: bool) -> TextProposal:
        return TextProposal(value["title"], value["description"])

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {"title": self.title, "description": self.description}

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> TextProposal:
        return TextProposal(data["title"], data["description"])

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> TextProposal:
        return TextProposal(proto.title, proto.description)

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(title=self.title, description=self.description)


class MsgDeposit(Msg):
    """Adds coins to the deposit of an active proposal."""

    TYPE_URL = "/cosmos.gov.v1beta1.MsgDeposit"
    AMINO_TYPES = ("gov/MsgDeposit", "cosmos-sdk/MsgDeposit")

    proposal_id: int
    depositor: str
    amount: Coins

    def __init__(self, proposal_id: int, depositor: str, amount: CoinsInput):
        self.proposal_id = proposal_id
        self.depositor = depositor
        self.amount = Coins(amount)

    @classmethod
    def _from_amino_value(cls, value: Dict[str, Any], is_classic: bool) -> MsgDeposit:
        return MsgDeposit(
            parse_uint64(value["proposal_id"], "proposal_id"),
            value["depositor"],
            Coins.from_amino(value["amount"]),
        )

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {
            "proposal_id": str(self.proposal_id),
            "depositor": self.depositor,
            "amount": self.amount.to_amino(),
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False) -> MsgDeposit:
        return MsgDeposit(
            parse_uint64(data["proposal_id"], "proposal_id"),
            data["depositor"],
            Coins.from_data(data["amount"]),
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "proposal_id": str(self.proposal_id),
            "depositor": self.depositor,
            "amount": self.amount.to_data(),
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgDeposit:
        return MsgDeposit(
            proto.proposal_id, proto.depositor, Coins.from_proto(proto.amount)
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            proposal_id=self.proposal_id,
            depositor=self.depositor,
            amount=self.amount.to_proto(),
        )


class MsgSubmitProposal(Msg):
    """Submits a proposal along with an initial deposit. The content is any registered proposal."""

    TYPE_URL = "/cosmos.gov.v1beta1.MsgSubmitProposal"
    AMINO_TYPES = ("gov/MsgSubmitProposal", "cosmos-sdk/MsgSubmitProposal")

    content: Msg
    initial_deposit: Coins
    proposer: str

    def __init__(self, content: Msg, initial_deposit: CoinsInput, proposer: str):
        self.content = content
        self.initial_deposit = Coins(initial_deposit)
        self.proposer = proposer

    @classmethod
    def _from_amino_value(
        cls, value: Dict[str, Any], is_classic: bool
    ) -> MsgSubmitProposal:
        from . import msgs

        return MsgSubmitProposal(
            msgs.from_amino(value["content"], is_classic),
            Coins.from_amino(value["initial_deposit"]),
            value["proposer"],
        )

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {
            "content": self.content.to_amino(is_classic),
            "initial_deposit": self.initial_deposit.to_amino(),
            "proposer": self.proposer,
        }

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], is_classic: bool = False
    ) -> MsgSubmitProposal:
        from . import msgs

        return MsgSubmitProposal(
            msgs.from_data(data["content"], is_classic, strict=False),
            Coins.from_data(data["initial_deposit"]),
            data["proposer"],
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "content": self.content.to_data(is_classic),
            "initial_deposit": self.initial_deposit.to_data(),
            "proposer": self.proposer,
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False) -> MsgSubmitProposal:
        from . import msgs

        return MsgSubmitProposal(
            msgs.unpack_any(proto.content, is_classic, strict=False),
            Coins.from_proto(proto.initial_deposit),
            proto.proposer,
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            content=self.content.pack_any(is_classic),
            initial_deposit=self.initial_deposit.to_proto(),
            proposer=self.proposer,
        )


class Test(unittest.TestCase):
    depositor = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"

    def test_deposit_legacy_amino(self):
        amino = {
            "type": "gov/MsgDeposit",
            "value": {
                "proposal_id": "12",
                "depositor": self.depositor,
                "amount": [{"denom": "axpla", "amount": "1000000"}],
            },
        }
        self.assertEqual(MsgDeposit.from_amino(amino, True).to_amino(True), amino)

    def test_deposit_amino(self):
        amino = {
            "type": "cosmos-sdk/MsgDeposit",
            "value": {
                "proposal_id": "3",
                "depositor": self.depositor,
                "amount": [{"denom": "axpla", "amount": "5"}],
            },
        }
        deposit = MsgDeposit.from_amino(amino, False)
        self.assertEqual(deposit.proposal_id, 3)
        self.assertEqual(deposit.to_amino(False), amino)

    def test_deposit_proto(self):
        deposit = MsgDeposit(3, self.depositor, {"axpla": 5})
        self.assertEqual(MsgDeposit.from_proto(deposit.to_proto()), deposit)
        self.assertEqual(MsgDeposit.from_data(deposit.to_data()), deposit)

    def test_text_proposal(self):
        proposal = TextProposal("title", "description")
        self.assertEqual(proposal.to_amino(True)["type"], "gov/TextProposal")
        self.assertEqual(proposal.to_amino(False)["type"], "cosmos-sdk/TextProposal")
        self.assertEqual(TextProposal.from_amino(proposal.to_amino()), proposal)
        self.assertEqual(TextProposal.from_data(proposal.to_data()), proposal)
        self.assertEqual(TextProposal.from_proto(proposal.to_proto()), proposal)
        self.assertEqual(TextProposal.unpack_any(proposal.pack_any()), proposal)

    def test_submit_proposal(self):
        msg = MsgSubmitProposal(
            TextProposal("title", "description"), "10axpla", self.depositor
        )
        self.assertEqual(MsgSubmitProposal.from_proto(msg.to_proto()), msg)
        self.assertEqual(MsgSubmitProposal.from_data(msg.to_data()), msg)
        self.assertEqual(MsgSubmitProposal.from_amino(msg.to_amino(True), True), msg)

        amino = msg.to_amino(True)
        self.assertEqual(amino["type"], "gov/MsgSubmitProposal")
        self.assertEqual(amino["value"]["content"]["type"], "gov/TextProposal")
        self.assertEqual(
            msg.to_data()["content"]["@type"], "/cosmos.gov.v1beta1.TextProposal"
        )


if __name__ == "__main__":
    unittest.main()
