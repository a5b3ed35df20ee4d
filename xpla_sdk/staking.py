# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from decimal import Decimal
from typing import Any, Dict, List

from .coins import Coin
from .msg import Msg
from .numeric import Numeric, parse_int64, to_decimal


class _DelegationMsg(Msg):
    delegator_address: str
    validator_address: str
    amount: Coin

    def __init__(self, delegator_address: str, validator_address: str, amount: Coin):
        self.delegator_address = delegator_address
        self.validator_address = validator_address
        self.amount = amount

    @classmethod
    def _from_amino_value(cls, value: Dict[str, Any], is_classic: bool):
        return cls(
            value["delegator_address"],
            value["validator_address"],
            Coin.from_amino(value["amount"]),
        )

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        return {
            "delegator_address": self.delegator_address,
            "validator_address": self.validator_address,
            "amount": self.amount.to_amino(),
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any], is_classic: bool = False):
        return cls(
            data["delegator_address"],
            data["validator_address"],
            Coin.from_data(data["amount"]),
        )

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "@type": self.TYPE_URL,
            "delegator_address": self.delegator_address,
            "validator_address": self.validator_address,
            "amount": self.amount.to_data(),
        }

    @classmethod
    def from_proto(cls, proto: Any, is_classic: bool = False):
        return cls(
            proto.delegator_address,
            proto.validator_address,
            Coin.from_proto(proto.amount),
        )

    def to_proto(self, is_classic: bool = False) -> Any:
        return self.proto_class()(
            delegator_address=self.delegator_address,
            validator_address=self.validator_address,
            amount=self.amount.to_proto(),
        )


class MsgDelegate(_DelegationMsg):
    """Delegates coins from a delegator to a validator."""

    TYPE_URL = "/cosmos.staking.v1beta1.MsgDelegate"
    AMINO_TYPES = ("staking/MsgDelegate", "cosmos-sdk/MsgDelegate")


class MsgUndelegate(_DelegationMsg):
    """Starts unbonding previously delegated coins."""

    TYPE_URL = "/cosmos.staking.v1beta1.MsgUndelegate"
    AMINO_TYPES = ("staking/MsgUndelegate", "cosmos-sdk/MsgUndelegate")


class Delegation:
    """Coins bonded by a delegator to a validator, and the shares they represent."""

    delegator_address: str
    validator_address: str
    shares: Decimal
    balance: Coin

    def __init__(
        self, delegator_address: str, validator_address: str, shares: Numeric, balance: Coin
    ):
        self.delegator_address = delegator_address
        self.validator_address = validator_address
        self.shares = to_decimal(shares)
        self.balance = balance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delegation):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"Delegation({self.delegator_address!r}, {self.validator_address!r}, {self.balance})"

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Delegation:
        delegation = data["delegation"]
        return Delegation(
            delegation["delegator_address"],
            delegation["validator_address"],
            delegation["shares"],
            Coin.from_data(data["balance"]),
        )


class UnbondingEntry:
    creation_height: int
    completion_time: str
    initial_balance: int
    balance: int

    def __init__(
        self, creation_height: int, completion_time: str, initial_balance: int, balance: int
    ):
        self.creation_height = creation_height
        self.completion_time = completion_time
        self.initial_balance = initial_balance
        self.balance = balance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnbondingEntry):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any]) -> UnbondingEntry:
        return UnbondingEntry(
            parse_int64(data["creation_height"], "creation_height"),
            data["completion_time"],
            int(data["initial_balance"]),
            int(data["balance"]),
        )


class UnbondingDelegation:
    delegator_address: str
    validator_address: str
    entries: List[UnbondingEntry]

    def __init__(
        self, delegator_address: str, validator_address: str, entries: List[UnbondingEntry]
    ):
        self.delegator_address = delegator_address
        self.validator_address = validator_address
        self.entries = entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnbondingDelegation):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any]) -> UnbondingDelegation:
        return UnbondingDelegation(
            data["delegator_address"],
            data["validator_address"],
            [UnbondingEntry.from_data(entry) for entry in data.get("entries") or []],
        )


class Validator:
    """
    A validator as the staking module reports it. Description and commission are kept as the node
    sends them; token amounts and shares are parsed.
    """

    operator_address: str
    consensus_pubkey: Dict[str, Any]
    jailed: bool
    status: str
    tokens: int
    delegator_shares: Decimal
    description: Dict[str, str]
    unbonding_height: int
    unbonding_time: str
    commission: Dict[str, Any]
    min_self_delegation: int

    def __init__(
        self,
        operator_address: str,
        consensus_pubkey: Dict[str, Any],
        jailed: bool,
        status: str,
        tokens: int,
        delegator_shares: Numeric,
        description: Dict[str, str],
        unbonding_height: int,
        unbonding_time: str,
        commission: Dict[str, Any],
        min_self_delegation: int,
    ):
        self.operator_address = operator_address
        self.consensus_pubkey = consensus_pubkey
        self.jailed = jailed
        self.status = status
        self.tokens = tokens
        self.delegator_shares = to_decimal(delegator_shares)
        self.description = description
        self.unbonding_height = unbonding_height
        self.unbonding_time = unbonding_time
        self.commission = commission
        self.min_self_delegation = min_self_delegation

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Validator):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"Validator({self.operator_address!r}, {self.status}, tokens={self.tokens})"

    @staticmethod
    def from_data(data: Dict[str, Any]) -> Validator:
        return Validator(
            data["operator_address"],
            data.get("consensus_pubkey") or {},
            bool(data.get("jailed")),
            data["status"],
            int(data["tokens"]),
            data["delegator_shares"],
            data.get("description") or {},
            parse_int64(data.get("unbonding_height") or 0, "unbonding_height"),
            data.get("unbonding_time") or "",
            data.get("commission") or {},
            int(data.get("min_self_delegation") or 0),
        )


class StakingPool:
    bonded_tokens: Coin
    not_bonded_tokens: Coin

    def __init__(self, bonded_tokens: Coin, not_bonded_tokens: Coin):
        self.bonded_tokens = bonded_tokens
        self.not_bonded_tokens = not_bonded_tokens

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StakingPool):
            return NotImplemented
        return vars(self) == vars(other)

    @staticmethod
    def from_data(data: Dict[str, Any], bond_denom: str) -> StakingPool:
        return StakingPool(
            Coin(bond_denom, int(data["bonded_tokens"])),
            Coin(bond_denom, int(data["not_bonded_tokens"])),
        )


class Test(unittest.TestCase):
    delegator = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"
    validator = "xplavaloper1gtw2uxdkdt3tvq790ckjz8jm8qgwkdw3uptstn"

    def test_delegate(self):
        msg = MsgDelegate(self.delegator, self.validator, Coin("axpla", 1000))
        self.assertEqual(msg.to_amino(True)["type"], "staking/MsgDelegate")
        self.assertEqual(msg.to_amino()["type"], "cosmos-sdk/MsgDelegate")
        self.assertEqual(MsgDelegate.from_amino(msg.to_amino()), msg)
        self.assertEqual(MsgDelegate.from_data(msg.to_data()), msg)
        self.assertEqual(MsgDelegate.from_proto(msg.to_proto()), msg)

    def test_undelegate_is_distinct(self):
        delegate = MsgDelegate(self.delegator, self.validator, Coin("axpla", 1))
        undelegate = MsgUndelegate(self.delegator, self.validator, Coin("axpla", 1))
        self.assertNotEqual(delegate, undelegate)
        self.assertEqual(
            undelegate.to_data()["@type"], "/cosmos.staking.v1beta1.MsgUndelegate"
        )
        self.assertEqual(MsgUndelegate.unpack_any(undelegate.pack_any()), undelegate)

    def test_delegation_from_data(self):
        delegation = Delegation.from_data(
            {
                "delegation": {
                    "delegator_address": self.delegator,
                    "validator_address": self.validator,
                    "shares": "1000.000000000000000000",
                },
                "balance": {"denom": "axpla", "amount": "1000"},
            }
        )
        self.assertEqual(delegation.shares, Decimal(1000))
        self.assertEqual(delegation.balance, Coin("axpla", 1000))

    def test_unbonding_delegation_from_data(self):
        unbonding = UnbondingDelegation.from_data(
            {
                "delegator_address": self.delegator,
                "validator_address": self.validator,
                "entries": [
                    {
                        "creation_height": "10",
                        "completion_time": "2023-01-22T00:00:00Z",
                        "initial_balance": "5",
                        "balance": "5",
                    }
                ],
            }
        )
        self.assertEqual(
            unbonding.entries, [UnbondingEntry(10, "2023-01-22T00:00:00Z", 5, 5)]
        )

    def test_validator_from_data(self):
        validator = Validator.from_data(
            {
                "operator_address": self.validator,
                "consensus_pubkey": {
                    "@type": "/cosmos.crypto.ed25519.PubKey",
                    "key": "nVwYoS2Oa3Zc6hNvkPdB9KGSmPD6QG4MbgSxuxl/Kic=",
                },
                "jailed": False,
                "status": "BOND_STATUS_BONDED",
                "tokens": "100000000000000000000000",
                "delegator_shares": "100000000000000000000000.000000000000000000",
                "description": {"moniker": "node0"},
                "unbonding_height": "0",
                "unbonding_time": "1970-01-01T00:00:00Z",
                "commission": {"commission_rates": {"rate": "0.1"}},
                "min_self_delegation": "1",
            }
        )
        self.assertEqual(validator.tokens, 10**23)
        self.assertEqual(validator.delegator_shares, Decimal(10**23))
        self.assertEqual(validator.description["moniker"], "node0")
        self.assertFalse(validator.jailed)

    def test_pool_from_data(self):
        pool = StakingPool.from_data(
            {"bonded_tokens": "300", "not_bonded_tokens": "7"}, "axpla"
        )
        self.assertEqual(pool, StakingPool(Coin("axpla", 300), Coin("axpla", 7)))


if __name__ == "__main__":
    unittest.main()
