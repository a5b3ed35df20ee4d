# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

"""
The codec contract shared by every transaction message and governance proposal. Each variant
converts between its in-memory form and three wire forms:

* Amino: legacy JSON wrapped as {"type": <tag>, "value": {...}}. The tag depends on whether the
  chain is a classic chain.
* Data: JSON carrying the protobuf type URL under "@type".
* Proto: the protobuf message, which is what ends up on chain.

`pack_any` wraps the Proto form into a google.protobuf.Any so a single field can hold any variant.
"""

from __future__ import annotations

import base64
import typing
from typing import Any, Dict, Optional

from google.protobuf.message import Message

from . import protos


class UnsupportedRepresentationError(Exception):
    """The message type has no codec for the requested representation"""

    type_url: str
    representation: str

    def __init__(self, type_url: str, representation: str = "amino"):
        super().__init__(f"{representation} is not supported by {type_url}")
        self.type_url = type_url
        self.representation = representation


class UnknownMessageError(Exception):
    """No registered message type matches the given type URL or Amino tag"""

    tag: str

    def __init__(self, tag: str):
        super().__init__(f"Unknown message type: {tag}")
        self.tag = tag


M = typing.TypeVar("M", bound="Msg")


class Msg:
    """
    Base class for message and proposal variants. Subclasses declare:

    TYPE_URL: the protobuf type URL, used as "@type" in Data and as the Any type URL.
    AMINO_TYPES: (classic tag, current tag), or None when the variant has no Amino codec.
    """

    TYPE_URL: typing.ClassVar[str]
    AMINO_TYPES: typing.ClassVar[Optional[typing.Tuple[str, str]]] = None

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for (key, value) in vars(self).items())
        return f"{type(self).__name__}({fields})"

    @classmethod
    def proto_class(cls) -> typing.Type[Message]:
        return protos.message_class(protos.type_url_to_name(cls.TYPE_URL))

    @classmethod
    def amino_type(cls, is_classic: bool = False) -> str:
        if cls.AMINO_TYPES is None:
            raise UnsupportedRepresentationError(cls.TYPE_URL)
        (classic, current) = cls.AMINO_TYPES
        return classic if is_classic else current

    # Amino

    @classmethod
    def from_amino(cls: typing.Type[M], data: Dict[str, Any], is_classic: bool = False) -> M:
        cls.amino_type(is_classic)
        return cls._from_amino_value(data["value"], is_classic)

    def to_amino(self, is_classic: bool = False) -> Dict[str, Any]:
        return {
            "type": self.amino_type(is_classic),
            "value": self._amino_value(is_classic),
        }

    @classmethod
    def _from_amino_value(cls: typing.Type[M], value: Dict[str, Any], is_classic: bool) -> M:
        raise UnsupportedRepresentationError(cls.TYPE_URL)

    def _amino_value(self, is_classic: bool) -> Dict[str, Any]:
        raise UnsupportedRepresentationError(self.TYPE_URL)

    # Data

    @classmethod
    def from_data(cls: typing.Type[M], data: Dict[str, Any], is_classic: bool = False) -> M:
        raise NotImplementedError

    def to_data(self, is_classic: bool = False) -> Dict[str, Any]:
        raise NotImplementedError

    # Proto

    @classmethod
    def from_proto(cls: typing.Type[M], proto: Any, is_classic: bool = False) -> M:
        raise NotImplementedError

    def to_proto(self, is_classic: bool = False) -> Any:
        raise NotImplementedError

    # Any

    def pack_any(self, is_classic: bool = False) -> Any:
        return protos.Any(
            type_url=self.TYPE_URL,
            value=self.to_proto(is_classic).SerializeToString(),
        )

    @classmethod
    def unpack_any(cls: typing.Type[M], envelope: Any, is_classic: bool = False) -> M:
        if envelope.type_url != cls.TYPE_URL:
            raise UnknownMessageError(envelope.type_url)
        return cls.from_proto(cls.proto_class().FromString(envelope.value), is_classic)


def b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode()


def b64decode(value: Optional[str]) -> bytes:
    return base64.b64decode(value or "")
