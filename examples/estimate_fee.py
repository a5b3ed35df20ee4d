# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

import asyncio
import json

from xpla_sdk.async_client import ClientConfig, LCDClient
from xpla_sdk.bank import MsgSend
from xpla_sdk.tx import SignerOptions
from xpla_sdk.tx_api import CreateTxOptions

from .common import CHAIN_ID, LCD_URL, SENDER


async def main():
    client_config = ClientConfig()
    client_config.chain_id = CHAIN_ID
    client_config.gas_adjustment = 1.4
    lcd = LCDClient(LCD_URL, client_config)

    account = await lcd.auth.account_info(SENDER)
    print("\n=== Account ===")
    print(f"Sequence: {account.get_sequence_number()}")

    options = CreateTxOptions([MsgSend(SENDER, SENDER, "1axpla")], memo="estimate")
    tx = await lcd.tx.create([SignerOptions(SENDER)], options)

    print("\n=== Estimated fee ===")
    print(json.dumps(tx.auth_info.fee.to_data(), indent=4, sort_keys=True))
    print(f"\nUnsigned tx: {lcd.tx.encode(tx)}")

    await lcd.close()


if __name__ == "__main__":
    asyncio.run(main())
