# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

import asyncio

from xpla_sdk.async_client import LCDClient
from xpla_sdk.broadcast_result import is_tx_error

from .common import LCD_URL


async def main():
    lcd = LCDClient(LCD_URL)

    block = await lcd.tendermint.block_info()
    height = int(block["block"]["header"]["height"])
    print(f"\n=== Transactions at height {height} ===")

    for info in await lcd.tx.tx_infos_by_height(height):
        status = "failed" if is_tx_error(info) else "ok"
        print(f"{info.txhash}: {status}, gas used {info.gas_used}")
        for log in info.logs:
            for (event_type, attributes) in log.events_by_type().items():
                print(f"  {event_type}: {sorted(attributes)}")

    await lcd.close()


if __name__ == "__main__":
    asyncio.run(main())
