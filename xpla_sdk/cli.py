# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import sys
from typing import Any, List, Tuple

from .async_client import ClientConfig, LCDClient
from .tx import Tx
from .tx_api import hash_to_hex


def key_value(indata: str) -> Tuple[str, str]:
    split_indata = indata.split("=", 1)
    if len(split_indata) != 2 or not split_indata[0]:
        raise ValueError("Invalid event, expected type.attribute=value")
    return (split_indata[0], split_indata[1])


def print_json(data: Any):
    print(json.dumps(data, indent=4, sort_keys=True))


def decode_tx(encoded_tx: str, is_classic: bool):
    tx = Tx.from_bytes(base64.b64decode(encoded_tx), is_classic)
    print_json({"txhash": hash_to_hex(encoded_tx), "tx": tx.to_data(is_classic)})


async def query(parsed_args: argparse.Namespace):
    client_config = ClientConfig()
    client_config.is_classic = parsed_args.classic
    lcd = LCDClient(parsed_args.lcd_url, client_config)
    try:
        if parsed_args.command == "tx-info":
            info = await lcd.tx.tx_info(parsed_args.hash)
            print_json(
                {
                    "height": info.height,
                    "txhash": info.txhash,
                    "code": info.code,
                    "gas_wanted": info.gas_wanted,
                    "gas_used": info.gas_used,
                    "logs": [log.to_data() for log in info.logs],
                    "tx": info.tx.to_data(parsed_args.classic),
                }
            )
        elif parsed_args.command == "block-txs":
            print_json(await lcd.tx.tx_hashes_by_height(parsed_args.height))
        elif parsed_args.command == "search":
            result = await lcd.tx.search(parsed_args.event or [])
            print_json(
                {
                    "txhashes": [info.txhash for info in result.txs],
                    "pagination": result.pagination,
                }
            )
    finally:
        await lcd.close()


async def main(args: List[str]):
    parser = argparse.ArgumentParser(description="XPLA Python CLI")
    parser.add_argument(
        "command",
        type=str,
        help="The command to execute",
        choices=["decode-tx", "tx-info", "block-txs", "search"],
    )
    parser.add_argument(
        "--tx", help="A base64 encoded transaction, as found in a block", type=str
    )
    parser.add_argument("--hash", help="The hash of the transaction to look up", type=str)
    parser.add_argument(
        "--height", help="The block height, the latest block if omitted", type=int
    )
    parser.add_argument(
        "--event",
        help="An event condition to search by, e.g., message.sender=xpla1...",
        nargs="*",
        type=key_value,
    )
    parser.add_argument(
        "--classic",
        help="Use the classic Amino type names",
        action="store_true",
    )
    parser.add_argument(
        "--lcd-url",
        help="The LCD to send queries to, e.g., https://dimension-lcd.xpla.dev",
        type=str,
    )
    parsed_args = parser.parse_args(args)

    if parsed_args.command == "decode-tx":
        if parsed_args.tx is None:
            parser.error("Missing required argument '--tx'")
        decode_tx(parsed_args.tx, parsed_args.classic)
        return

    if parsed_args.lcd_url is None:
        parser.error("Missing required argument '--lcd-url'")
    if parsed_args.command == "tx-info" and parsed_args.hash is None:
        parser.error("Missing required argument '--hash'")
    if parsed_args.command == "search" and not parsed_args.event:
        parser.error("Missing required argument '--event'")
    await query(parsed_args)


import contextlib
import io
import unittest


class Test(unittest.IsolatedAsyncioTestCase):
    async def test_decode_tx(self):
        from .bank import MsgSend
        from .tx import AuthInfo, Fee, TxBody

        tx = Tx(
            TxBody([MsgSend("xpla1a", "xpla1b", "5axpla")], "cli"),
            AuthInfo([], Fee(100, "1axpla")),
            [],
        )
        encoded = base64.b64encode(tx.to_bytes()).decode()

        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            await main(["decode-tx", "--tx", encoded])
        decoded = json.loads(output.getvalue())
        self.assertEqual(decoded["txhash"], hash_to_hex(encoded))
        self.assertEqual(decoded["tx"]["body"]["memo"], "cli")

    def test_key_value(self):
        self.assertEqual(key_value("tx.height=5"), ("tx.height", "5"))
        self.assertEqual(key_value("a=b=c"), ("a", "b=c"))
        with self.assertRaises(ValueError):
            key_value("nothing")

    async def test_missing_lcd_url(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                await main(["tx-info", "--hash", "ABC"])


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
