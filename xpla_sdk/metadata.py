# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

import importlib.metadata as metadata

# constants
PACKAGE_NAME = "xpla-sdk"


class Metadata:
    XPLA_HEADER = "x-xpla-client"

    @staticmethod
    def get_xpla_header_val():
        try:
            version = metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            version = "unknown"
        return f"xpla-python-sdk/{version}"
