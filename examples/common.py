# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

import os

LCD_URL = os.getenv("XPLA_LCD_URL", "https://dimension-lcd.xpla.dev")
CHAIN_ID = os.getenv("XPLA_CHAIN_ID", "dimension_37-1")
SENDER = os.getenv("XPLA_SENDER", "xpla1y4umfuqfg76t8mfcff6zzx7elvy93jtp4xcdvw")
