"""
Per-field transform rules.
Each transform converts one field in one direction, reading from the source
object and writing into the target record. Wire objects may be mappings or
plain attribute objects; targets are always dicts.
"""
from __future__ import annotations

import ipaddress
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, ClassVar

from ormgen.conversion.codec import ResourceCodec
from ormgen.core.exceptions import ConversionError
from ormgen.models.hook import Direction
from ormgen.schemas.descriptor import EnumDescriptor

if TYPE_CHECKING:
    from ormgen.conversion.converter import TypeConverter

ConverterLookup = Callable[[str], "TypeConverter"]

NIL_UUID = uuid.UUID(int=0)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# 0001-01-01T00:00:00Z .. 9999-12-31T23:59:59Z
MIN_TIMESTAMP_SECONDS = -62135596800
MAX_TIMESTAMP_SECONDS = 253402300799
SECONDS_PER_DAY = 24 * 60 * 60


def read_field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


class FieldTransform:
    """Base rule: copy the value as is."""

    rule: ClassVar[str] = "copy"
    # Guarded rules leave the target untouched when the source value is missing.
    guarded: ClassVar[bool] = False

    def __init__(self, field_name: str, direction: Direction) -> None:
        self.field_name = field_name
        self.direction = direction

    def apply(self, source: Any, target: dict[str, Any], ctx: Any = None) -> None:
        value = read_field(source, self.field_name)
        if self.guarded and self.is_missing(value):
            return
        if self.direction is Direction.TO_STORAGE:
            target[self.field_name] = self.to_storage(value, ctx)
        else:
            target[self.field_name] = self.to_wire(value, ctx)

    def is_missing(self, value: Any) -> bool:
        return value is None

    def to_storage(self, value: Any, ctx: Any) -> Any:
        return value

    def to_wire(self, value: Any, ctx: Any) -> Any:
        return value

    def fail(self, detail: str) -> ConversionError:
        return ConversionError(f"{self.field_name}: {detail}", field_name=self.field_name)

    def describe(self) -> dict[str, Any]:
        return {"field": self.field_name, "direction": self.direction.value, "rule": self.rule}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.field_name} {self.direction.value}>"


class DirectCopy(FieldTransform):
    rule = "copy"


class ArrayCopy(FieldTransform):
    rule = "array_copy"
    guarded = True

    def is_missing(self, value: Any) -> bool:
        return not value

    def to_storage(self, value: Any, ctx: Any) -> list[Any]:
        return list(value)

    to_wire = to_storage


class EnumTransform(FieldTransform):
    rule = "enum"

    def __init__(
        self,
        field_name: str,
        direction: Direction,
        *,
        enum: EnumDescriptor | None,
        string_mode: bool,
    ) -> None:
        super().__init__(field_name, direction)
        self.string_mode = string_mode
        self.enum_name = enum.name if enum else None
        self._names = enum.names if enum else {}
        self._values = dict(enum.values) if enum else {}

    def to_storage(self, value: Any, ctx: Any) -> Any:
        number = 0 if value is None else int(value)
        if self.string_mode:
            return self._names.get(number, "")
        return number

    def to_wire(self, value: Any, ctx: Any) -> int:
        if self.string_mode:
            return self._values.get(value, 0) if value is not None else 0
        return 0 if value is None else int(value)

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info.update(enum=self.enum_name, representation="string" if self.string_mode else "integer")
        return info


class WrapperTransform(FieldTransform):
    rule = "wrapper"
    guarded = True

    def to_storage(self, value: Any, ctx: Any) -> Any:
        return read_field(value, "value")

    def to_wire(self, value: Any, ctx: Any) -> dict[str, Any]:
        return {"value": value}


class UUIDTransform(FieldTransform):
    """Required UUID; a missing wire value becomes the nil UUID."""

    rule = "uuid"

    def to_storage(self, value: Any, ctx: Any) -> uuid.UUID:
        if value is None:
            return NIL_UUID
        return self.parse(read_field(value, "value"))

    def to_wire(self, value: Any, ctx: Any) -> dict[str, str]:
        return {"value": str(value if value is not None else NIL_UUID)}

    def parse(self, text: Any) -> uuid.UUID:
        if isinstance(text, uuid.UUID):
            return text
        try:
            return uuid.UUID(str(text))
        except ValueError as exc:
            raise self.fail(f"invalid UUID {text!r}") from exc


class UUIDValueTransform(UUIDTransform):
    rule = "uuid_value"
    guarded = True


class TimestampTransform(FieldTransform):
    rule = "timestamp"
    guarded = True

    def to_storage(self, value: Any, ctx: Any) -> datetime:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        seconds = int(read_field(value, "seconds") or 0)
        nanos = int(read_field(value, "nanos") or 0)
        self._check(seconds, nanos)
        return EPOCH + timedelta(seconds=seconds, microseconds=nanos // 1000)

    def to_wire(self, value: Any, ctx: Any) -> dict[str, int]:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - EPOCH
        seconds = delta.days * SECONDS_PER_DAY + delta.seconds
        nanos = delta.microseconds * 1000
        self._check(seconds, nanos)
        return {"seconds": seconds, "nanos": nanos}

    def _check(self, seconds: int, nanos: int) -> None:
        if not 0 <= nanos < 1_000_000_000:
            raise self.fail(f"timestamp nanos {nanos} out of range")
        if not MIN_TIMESTAMP_SECONDS <= seconds <= MAX_TIMESTAMP_SECONDS:
            raise self.fail(f"timestamp seconds {seconds} out of range")


class JSONTransform(FieldTransform):
    rule = "json"
    guarded = True

    def to_storage(self, value: Any, ctx: Any) -> bytes:
        text = read_field(value, "value")
        if text is None:
            return b""
        if isinstance(text, (bytes, bytearray)):
            return bytes(text)
        return str(text).encode("utf-8")

    def to_wire(self, value: Any, ctx: Any) -> dict[str, str]:
        if isinstance(value, (bytes, bytearray)):
            try:
                return {"value": bytes(value).decode("utf-8")}
            except UnicodeDecodeError as exc:
                raise self.fail("JSON column is not valid UTF-8") from exc
        return {"value": str(value)}


class InetTransform(FieldTransform):
    rule = "inet"
    guarded = True

    def to_storage(self, value: Any, ctx: Any) -> Any:
        text = read_field(value, "value")
        try:
            return ipaddress.ip_interface(text)
        except ValueError as exc:
            raise self.fail(f"invalid network address {text!r}") from exc

    def to_wire(self, value: Any, ctx: Any) -> dict[str, str]:
        return {"value": str(value)}


class TimeOnlyTransform(FieldTransform):
    """Seconds since midnight on the wire, ``HH:MM:SS`` in storage."""

    rule = "time_only"
    guarded = True

    def is_missing(self, value: Any) -> bool:
        return value is None or value == ""

    def to_storage(self, value: Any, ctx: Any) -> str:
        seconds = int(read_field(value, "value") or 0)
        if not 0 <= seconds < SECONDS_PER_DAY:
            raise self.fail(f"time of day {seconds}s out of range")
        hours, rest = divmod(seconds, 3600)
        minutes, secs = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def to_wire(self, value: Any, ctx: Any) -> dict[str, int]:
        try:
            parsed = datetime.strptime(str(value), "%H:%M:%S")
        except ValueError as exc:
            raise self.fail(f"invalid time of day {value!r}") from exc
        return {"value": parsed.hour * 3600 + parsed.minute * 60 + parsed.second}


class IdentifierTransform(FieldTransform):
    """Routes resource identifiers through the resource codec."""

    rule = "identifier"

    def __init__(
        self,
        field_name: str,
        direction: Direction,
        *,
        codec: ResourceCodec | None,
        resource: str | None,
        base_type: str,
        nullable: bool,
    ) -> None:
        super().__init__(field_name, direction)
        self.codec = codec
        self.resource = resource
        self.base_type = base_type
        self.nullable = nullable

    def apply(self, source: Any, target: dict[str, Any], ctx: Any = None) -> None:
        value = read_field(source, self.field_name)
        if self.nullable and value is None:
            return
        codec = self._require_codec()
        if self.direction is Direction.TO_WIRE:
            target[self.field_name] = codec.encode(self.resource, value)
            return
        if self.base_type == "int64":
            target[self.field_name] = codec.decode_int64(self.resource, value)
        elif self.base_type == "bytes":
            target[self.field_name] = codec.decode_bytes(self.resource, value)
        else:
            decoded = codec.decode(self.resource, value)
            if decoded is not None:
                target[self.field_name] = decoded

    def _require_codec(self) -> ResourceCodec:
        if self.codec is None:
            raise self.fail("no resource codec configured for Identifier fields")
        return self.codec

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info.update(resource=self.resource, base_type=self.base_type, nullable=self.nullable)
        return info


class MessageTransform(FieldTransform):
    """Recursive conversion of a nested registered message."""

    rule = "message"
    guarded = True

    def __init__(
        self, field_name: str, direction: Direction, *, type_name: str, lookup: ConverterLookup
    ) -> None:
        super().__init__(field_name, direction)
        self.type_name = type_name
        self.lookup = lookup

    def to_storage(self, value: Any, ctx: Any) -> dict[str, Any]:
        return self.lookup(self.type_name).to_storage(value, ctx)

    def to_wire(self, value: Any, ctx: Any) -> dict[str, Any]:
        return self.lookup(self.type_name).to_wire(value, ctx)

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["type"] = self.type_name
        return info


class MessageListTransform(MessageTransform):
    """
    Element-wise recursive conversion. ``None`` elements pass through; the
    first failing element aborts the field.
    """

    rule = "message_list"

    def apply(self, source: Any, target: dict[str, Any], ctx: Any = None) -> None:
        values = read_field(source, self.field_name)
        if not values:
            return
        convert = self.to_storage if self.direction is Direction.TO_STORAGE else self.to_wire
        items = target[self.field_name] = list(target.get(self.field_name) or [])
        for value in values:
            items.append(None if value is None else convert(value, ctx))
