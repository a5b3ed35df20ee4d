# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0
