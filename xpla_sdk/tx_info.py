# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import unittest
from typing import Any, Dict, List, Optional, Union

from .numeric import parse_code, parse_int64, parse_optional_uint64
from .tx import Tx


class TxLog:
    """Events emitted by a single message of an executed transaction."""

    msg_index: int
    log: str
    events: List[Dict[str, Any]]

    def __init__(self, msg_index: int, log: str, events: List[Dict[str, Any]]):
        self.msg_index = msg_index
        self.log = log
        self.events = events

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TxLog):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"TxLog({self.msg_index}, events={len(self.events)})"

    def events_by_type(self) -> Dict[str, Dict[str, List[str]]]:
        """Groups attribute values by event type and then by attribute key."""
        grouped: Dict[str, Dict[str, List[str]]] = {}
        for event in self.events:
            attributes = grouped.setdefault(event["type"], {})
            for attribute in event.get("attributes") or []:
                attributes.setdefault(attribute["key"], []).append(attribute.get("value", ""))
        return grouped

    @staticmethod
    def from_data(data: Dict[str, Any]) -> TxLog:
        return TxLog(
            parse_optional_uint64(data.get("msg_index"), "msg_index"),
            data.get("log") or "",
            data.get("events") or [],
        )

    def to_data(self) -> Dict[str, Any]:
        return {"msg_index": self.msg_index, "log": self.log, "events": self.events}


class TxInfo:
    """A transaction as indexed by a node, along with its execution outcome."""

    height: int
    txhash: str
    raw_log: str
    logs: List[TxLog]
    gas_wanted: int
    gas_used: int
    tx: Tx
    timestamp: str
    code: Optional[Union[int, str]]
    codespace: Optional[str]

    def __init__(
        self,
        height: int,
        txhash: str,
        raw_log: str,
        logs: List[TxLog],
        gas_wanted: int,
        gas_used: int,
        tx: Tx,
        timestamp: str,
        code: Optional[Union[int, str]] = None,
        codespace: Optional[str] = None,
    ):
        self.height = height
        self.txhash = txhash
        self.raw_log = raw_log
        self.logs = logs
        self.gas_wanted = gas_wanted
        self.gas_used = gas_used
        self.tx = tx
        self.timestamp = timestamp
        self.code = code
        self.codespace = codespace

    def __repr__(self) -> str:
        return f"TxInfo({self.txhash!r}, height={self.height}, code={self.code!r})"

    @staticmethod
    def from_data(data: Dict[str, Any], is_classic: bool = False) -> TxInfo:
        return TxInfo(
            parse_int64(data["height"], "height"),
            data["txhash"],
            data.get("raw_log") or "",
            [TxLog.from_data(log) for log in data.get("logs") or []],
            parse_optional_uint64(data.get("gas_wanted"), "gas_wanted"),
            parse_optional_uint64(data.get("gas_used"), "gas_used"),
            Tx.from_data(data["tx"], is_classic),
            data.get("timestamp") or "",
            parse_code(data.get("code")),
            data.get("codespace"),
        )


class Test(unittest.TestCase):
    def tx_response(self) -> Dict[str, Any]:
        return {
            "height": "1234",
            "txhash": "A2B3",
            "codespace": "",
            "code": 0,
            "raw_log": "[]",
            "logs": [
                {
                    "msg_index": 0,
                    "log": "",
                    "events": [
                        {
                            "type": "transfer",
                            "attributes": [
                                {"key": "recipient", "value": "xpla1a"},
                                {"key": "amount", "value": "1axpla"},
                            ],
                        }
                    ],
                }
            ],
            "gas_wanted": "200000",
            "gas_used": "81234",
            "tx": {
                "@type": "/cosmos.tx.v1beta1.Tx",
                "body": {
                    "messages": [
                        {
                            "@type": "/cosmos.bank.v1beta1.MsgSend",
                            "from_address": "xpla1a",
                            "to_address": "xpla1b",
                            "amount": [{"denom": "axpla", "amount": "1"}],
                        }
                    ],
                    "memo": "",
                    "timeout_height": "0",
                },
                "auth_info": {
                    "signer_infos": [],
                    "fee": {"amount": [], "gas_limit": "200000", "payer": "", "granter": ""},
                },
                "signatures": [],
            },
            "timestamp": "2023-01-01T00:00:00Z",
        }

    def test_from_data(self):
        info = TxInfo.from_data(self.tx_response())
        self.assertEqual(info.height, 1234)
        self.assertEqual(info.gas_wanted, 200000)
        self.assertEqual(info.gas_used, 81234)
        self.assertEqual(info.code, 0)
        self.assertEqual(len(info.tx.body.messages), 1)
        self.assertEqual(
            info.logs[0].events_by_type(),
            {"transfer": {"recipient": ["xpla1a"], "amount": ["1axpla"]}},
        )

    def test_overflow(self):
        response = self.tx_response()
        response["gas_used"] = "18446744073709551616"
        with self.assertRaises(ValueError):
            TxInfo.from_data(response)

    def test_missing_logs(self):
        response = self.tx_response()
        del response["logs"]
        response["code"] = "5"
        info = TxInfo.from_data(response)
        self.assertEqual(info.logs, [])
        self.assertEqual(info.code, "5")


if __name__ == "__main__":
    unittest.main()
