# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
import unittest
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from . import protos
from .numeric import Numeric, ceil_int, to_decimal

COIN_PATTERN = re.compile(r"^(-?[0-9]+(?:\.[0-9]+)?)([a-zA-Z][a-zA-Z0-9/:._-]*)$")

Amount = Union[int, Decimal]


def _amount(value: Numeric) -> Amount:
    if isinstance(value, bool):
        raise ValueError(f"Invalid coin amount {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and "." not in value:
        return int(value)
    return to_decimal(value)


class Coin:
    """A single denomination amount. Integer amounts stay ints, gas prices are Decimals."""

    denom: str
    amount: Amount

    def __init__(self, denom: str, amount: Numeric):
        self.denom = denom
        self.amount = _amount(amount)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Coin):
            return NotImplemented
        return self.denom == other.denom and self.amount == other.amount

    def __repr__(self) -> str:
        return f"Coin({self.denom!r}, {self.amount!r})"

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    @staticmethod
    def from_str(value: str) -> Coin:
        match = COIN_PATTERN.match(value.strip())
        if match is None:
            raise ValueError(f"Unable to parse coin {value!r}")
        return Coin(match.group(2), match.group(1))

    def is_int_coin(self) -> bool:
        return isinstance(self.amount, int)

    def mul(self, value: Numeric) -> Coin:
        factor = _amount(value)
        if self.is_int_coin() and isinstance(factor, int):
            return Coin(self.denom, self.amount * factor)
        return Coin(self.denom, to_decimal(self.amount) * to_decimal(factor))

    def add(self, other: Coin) -> Coin:
        if other.denom != self.denom:
            raise ValueError(f"Cannot add {other.denom} to {self.denom}")
        if self.is_int_coin() and other.is_int_coin():
            return Coin(self.denom, self.amount + other.amount)
        return Coin(self.denom, to_decimal(self.amount) + to_decimal(other.amount))

    def to_int_ceil_coin(self) -> Coin:
        if self.is_int_coin():
            return self
        return Coin(self.denom, ceil_int(to_decimal(self.amount)))

    @staticmethod
    def from_data(data: Dict[str, str]) -> Coin:
        return Coin(data["denom"], data["amount"])

    def to_data(self) -> Dict[str, str]:
        return {"denom": self.denom, "amount": str(self.amount)}

    from_amino = from_data
    to_amino = to_data

    @staticmethod
    def from_proto(proto: Any) -> Coin:
        return Coin(proto.denom, proto.amount)

    def to_proto(self) -> Any:
        return protos.Coin(denom=self.denom, amount=str(self.amount))


CoinsInput = Union[
    None, str, "Coins", List[Coin], Dict[str, Numeric], Coin
]


class Coins:
    """
    A set of coins with unique denominations. Coins of the same denomination passed on construction
    are summed.
    """

    _coins: Dict[str, Coin]

    def __init__(self, coins: CoinsInput = None):
        self._coins = {}
        if coins is None:
            return
        if isinstance(coins, Coins):
            values: List[Coin] = coins.to_list()
        elif isinstance(coins, Coin):
            values = [coins]
        elif isinstance(coins, str):
            values = [Coin.from_str(value) for value in coins.split(",") if value]
        elif isinstance(coins, dict):
            values = [Coin(denom, amount) for (denom, amount) in coins.items()]
        else:
            values = list(coins)

        for coin in values:
            existing = self._coins.get(coin.denom)
            self._coins[coin.denom] = coin if existing is None else existing.add(coin)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Coins):
            return NotImplemented
        return self._coins == other._coins

    def __iter__(self) -> Iterator[Coin]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._coins)

    def __contains__(self, denom: object) -> bool:
        return denom in self._coins

    def __getitem__(self, denom: str) -> Coin:
        return self._coins[denom]

    def __repr__(self) -> str:
        return f"Coins({str(self)!r})"

    def __str__(self) -> str:
        return ",".join(str(coin) for coin in self.to_list())

    def get(self, denom: str) -> Optional[Coin]:
        return self._coins.get(denom)

    def denoms(self) -> List[str]:
        return sorted(self._coins)

    def to_list(self) -> List[Coin]:
        return [self._coins[denom] for denom in self.denoms()]

    def filter(self, predicate: Callable[[Coin], bool]) -> Coins:
        return Coins([coin for coin in self.to_list() if predicate(coin)])

    def mul(self, value: Numeric) -> Coins:
        return Coins([coin.mul(value) for coin in self.to_list()])

    def to_int_ceil_coins(self) -> Coins:
        return Coins([coin.to_int_ceil_coin() for coin in self.to_list()])

    @staticmethod
    def from_data(data: Optional[List[Dict[str, str]]]) -> Coins:
        return Coins([Coin.from_data(value) for value in data or []])

    def to_data(self) -> List[Dict[str, str]]:
        return [coin.to_data() for coin in self.to_list()]

    from_amino = from_data
    to_amino = to_data

    @staticmethod
    def from_proto(proto: Any) -> Coins:
        return Coins([Coin.from_proto(value) for value in proto])

    def to_proto(self) -> List[Any]:
        return [coin.to_proto() for coin in self.to_list()]


class Test(unittest.TestCase):
    def test_from_str(self):
        coins = Coins("0.15axpla,10uatom")
        self.assertEqual(coins["axpla"].amount, Decimal("0.15"))
        self.assertEqual(coins["uatom"].amount, 10)
        self.assertEqual(coins.denoms(), ["axpla", "uatom"])
        self.assertEqual(str(coins), "0.15axpla,10uatom")

    def test_invalid_coin(self):
        with self.assertRaises(ValueError):
            Coin.from_str("axpla10")

    def test_duplicate_denoms_are_summed(self):
        coins = Coins([Coin("axpla", 1), Coin("axpla", 2)])
        self.assertEqual(len(coins), 1)
        self.assertEqual(coins["axpla"].amount, 3)

    def test_fee_rounding(self):
        fee = Coins({"axpla": "0.15", "uatom": "0.15"}).mul(1000).to_int_ceil_coins()
        self.assertEqual(fee, Coins({"axpla": 150, "uatom": 150}))

        fee = Coins({"axpla": "0.15"}).mul(1001).to_int_ceil_coins()
        self.assertEqual(fee["axpla"].amount, 151)

    def test_filter(self):
        coins = Coins("1axpla,2uatom").filter(lambda coin: coin.denom == "axpla")
        self.assertEqual(coins, Coins("1axpla"))

    def test_data(self):
        coins = Coins({"axpla": 8102024952})
        data = coins.to_data()
        self.assertEqual(data, [{"denom": "axpla", "amount": "8102024952"}])
        self.assertEqual(Coins.from_data(data), coins)

    def test_proto(self):
        coins = Coins("5axpla,7uatom")
        self.assertEqual(Coins.from_proto(coins.to_proto()), coins)


if __name__ == "__main__":
    unittest.main()
