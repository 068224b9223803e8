"""
Resource identifier codec contract.
Identifier fields are converted through a codec supplied by the caller. The
``target`` argument is the origin name of the referenced type when known.
Implementations report failures by raising ``ConversionError``.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResourceCodec(Protocol):

    def decode(self, target: str | None, identifier: Any) -> Any:
        ...

    def decode_int64(self, target: str | None, identifier: Any) -> int:
        ...

    def decode_bytes(self, target: str | None, identifier: Any) -> bytes:
        ...

    def encode(self, target: str | None, value: Any) -> Any:
        ...
