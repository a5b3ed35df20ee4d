# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
Outcomes of submitting a transaction, one shape per delivery mode. Each mode's result extends the
one before it:

    AsyncTxBroadcastResult   height, txhash
    SyncTxBroadcastResult    + raw_log, code, codespace
    WaitTxBroadcastResult    + gas_wanted, gas_used, timestamp, logs
    BlockTxBroadcastResult   + info, data

A result is an error if and only if it carries a code other than 0 or "0" (see is_tx_error). Error
results never carry logs.
"""

from __future__ import annotations

import unittest
from typing import Any, Dict, List, Optional, Union

from .numeric import parse_code, parse_int64, parse_optional_uint64
from .tx_info import TxInfo, TxLog

Code = Optional[Union[int, str]]


def is_tx_error(result: Any) -> bool:
    code = getattr(result, "code", None)
    return code is not None and code != 0 and code != "0"


class TxError:
    """A node's rejection of a transaction, from simulation or submission."""

    code: Union[int, str]
    message: Optional[str]
    codespace: Optional[str]

    def __init__(
        self,
        code: Union[int, str],
        message: Optional[str] = None,
        codespace: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.codespace = codespace

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TxError):
            return NotImplemented
        return vars(self) == vars(other)

    def __str__(self) -> str:
        return f"code {self.code} ({self.codespace or 'unknown'}): {self.message or ''}"

    @staticmethod
    def from_data(data: Dict[str, Any]) -> TxError:
        return TxError(data["code"], data.get("message"), data.get("codespace"))


class _BroadcastResult:
    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for (key, value) in vars(self).items())
        return f"{type(self).__name__}({fields})"

    def is_error(self) -> bool:
        return is_tx_error(self)


class AsyncTxBroadcastResult(_BroadcastResult):
    height: int
    txhash: str

    def __init__(self, height: int, txhash: str):
        self.height = height
        self.txhash = txhash

    @staticmethod
    def from_data(data: Dict[str, Any]) -> AsyncTxBroadcastResult:
        return AsyncTxBroadcastResult(
            parse_int64(data.get("height") or 0, "height"), data["txhash"]
        )


class SyncTxBroadcastResult(AsyncTxBroadcastResult):
    raw_log: str
    code: Code
    codespace: Optional[str]

    def __init__(
        self,
        height: int,
        txhash: str,
        raw_log: str,
        code: Code = None,
        codespace: Optional[str] = None,
    ):
        super().__init__(height, txhash)
        self.raw_log = raw_log
        self.code = code
        self.codespace = codespace

    @staticmethod
    def from_data(data: Dict[str, Any]) -> SyncTxBroadcastResult:
        return SyncTxBroadcastResult(
            parse_int64(data.get("height") or 0, "height"),
            data["txhash"],
            data.get("raw_log") or "",
            parse_code(data.get("code")),
            data.get("codespace"),
        )


class WaitTxBroadcastResult(SyncTxBroadcastResult):
    gas_wanted: int
    gas_used: int
    timestamp: str
    logs: List[TxLog]

    def __init__(
        self,
        height: int,
        txhash: str,
        raw_log: str,
        gas_wanted: int,
        gas_used: int,
        timestamp: str,
        logs: List[TxLog],
        code: Code = None,
        codespace: Optional[str] = None,
    ):
        super().__init__(height, txhash, raw_log, code, codespace)
        self.gas_wanted = gas_wanted
        self.gas_used = gas_used
        self.timestamp = timestamp
        self.logs = [] if is_tx_error(self) else logs

    @staticmethod
    def rejected(result: SyncTxBroadcastResult) -> WaitTxBroadcastResult:
        """The result of a submission the node refused before it reached a block."""
        return WaitTxBroadcastResult(
            result.height,
            result.txhash,
            result.raw_log,
            0,
            0,
            "",
            [],
            result.code,
            result.codespace,
        )

    @staticmethod
    def from_tx_info(info: TxInfo) -> WaitTxBroadcastResult:
        return WaitTxBroadcastResult(
            info.height,
            info.txhash,
            info.raw_log,
            info.gas_wanted,
            info.gas_used,
            info.timestamp,
            info.logs,
            info.code,
            info.codespace,
        )


class BlockTxBroadcastResult(WaitTxBroadcastResult):
    info: str
    data: str

    def __init__(
        self,
        height: int,
        txhash: str,
        raw_log: str,
        gas_wanted: int,
        gas_used: int,
        timestamp: str,
        logs: List[TxLog],
        info: str,
        data: str,
        code: Code = None,
        codespace: Optional[str] = None,
    ):
        super().__init__(
            height, txhash, raw_log, gas_wanted, gas_used, timestamp, logs, code, codespace
        )
        self.info = info
        self.data = data

    @staticmethod
    def from_data(data: Dict[str, Any]) -> BlockTxBroadcastResult:
        return BlockTxBroadcastResult(
            parse_int64(data.get("height") or 0, "height"),
            data["txhash"],
            data.get("raw_log") or "",
            parse_optional_uint64(data.get("gas_wanted"), "gas_wanted"),
            parse_optional_uint64(data.get("gas_used"), "gas_used"),
            data.get("timestamp") or "",
            [TxLog.from_data(log) for log in data.get("logs") or []],
            data.get("info") or "",
            data.get("data") or "",
            parse_code(data.get("code")),
            data.get("codespace"),
        )


class Test(unittest.TestCase):
    def test_is_tx_error(self):
        self.assertFalse(is_tx_error(SyncTxBroadcastResult(1, "A", "")))
        self.assertFalse(is_tx_error(SyncTxBroadcastResult(1, "A", "", 0)))
        self.assertFalse(is_tx_error(SyncTxBroadcastResult(1, "A", "", "0")))
        self.assertTrue(is_tx_error(SyncTxBroadcastResult(1, "A", "", 5)))
        self.assertTrue(is_tx_error(SyncTxBroadcastResult(1, "A", "", "13")))
        self.assertTrue(is_tx_error(TxError(32, "account sequence mismatch", "sdk")))
        self.assertFalse(is_tx_error(AsyncTxBroadcastResult(1, "A")))

    def test_sync_from_data(self):
        result = SyncTxBroadcastResult.from_data(
            {"height": "0", "txhash": "ABC", "raw_log": "[]", "code": 0, "codespace": ""}
        )
        self.assertEqual(result, SyncTxBroadcastResult(0, "ABC", "[]", 0, ""))
        self.assertFalse(result.is_error())

    def test_error_results_drop_logs(self):
        log = TxLog(0, "", [{"type": "message", "attributes": []}])
        result = WaitTxBroadcastResult(10, "ABC", "out of gas", 1, 2, "", [log], 11, "sdk")
        self.assertTrue(result.is_error())
        self.assertEqual(result.logs, [])

        result = WaitTxBroadcastResult(10, "ABC", "", 1, 2, "", [log], 0, "")
        self.assertEqual(result.logs, [log])

    def test_rejected(self):
        sync = SyncTxBroadcastResult(0, "ABC", "insufficient fee", 13, "sdk")
        result = WaitTxBroadcastResult.rejected(sync)
        self.assertEqual(result.code, 13)
        self.assertEqual(result.gas_used, 0)
        self.assertEqual(result.timestamp, "")
        self.assertEqual(result.logs, [])

    def test_block_from_data(self):
        result = BlockTxBroadcastResult.from_data(
            {
                "height": "77",
                "txhash": "ABC",
                "raw_log": "",
                "gas_wanted": "200000",
                "gas_used": "100000",
                "logs": [{"msg_index": 0, "log": "", "events": []}],
                "code": 0,
                "codespace": "",
                "info": "",
                "data": "0A1E",
                "timestamp": "",
            }
        )
        self.assertEqual(result.height, 77)
        self.assertEqual(result.gas_used, 100000)
        self.assertEqual(result.data, "0A1E")
        self.assertEqual(len(result.logs), 1)


if __name__ == "__main__":
    unittest.main()
