"""Protocol-buffer wire encoding and the framing of RPC requests.

A request on the wire is a 4-byte little-endian header length, the encoded
:class:`RpcHeader`, then the encoded call arguments.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1
_MAX_VARINT_BYTES = 10

_VARINT_KINDS = frozenset({"int32", "int64", "uint32", "uint64", "bool", "enum"})
_LENGTH_KINDS = frozenset({"string", "bytes", "message"})

_WIRE_VARINT = 0
_WIRE_FIXED64 = 1
_WIRE_LENGTH = 2
_WIRE_FIXED32 = 5

_LENGTH_PREFIX = struct.Struct("<I")

M = TypeVar("M", bound="Message")


class WireError(ValueError):
    """Raised when encoded data is malformed."""


def encode_varint(value: int) -> bytes:
    """Encode an unsigned integer below 2**64 as a base-128 varint."""
    if not 0 <= value <= _MASK64:
        raise ValueError(f"varint out of range: {value}")
    out = bytearray()
    while True:
        low = value & 0x7F
        value >>= 7
        if value:
            out.append(low | 0x80)
        else:
            out.append(low)
            return bytes(out)


def decode_varint(data: bytes, pos: int) -> Tuple[int, int]:
    """Decode a varint at *pos*; return the value and the position after it."""
    result = 0
    for shift_index in range(_MAX_VARINT_BYTES):
        if pos >= len(data):
            raise WireError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << (7 * shift_index)
        if not byte & 0x80:
            return result & _MASK64, pos
    raise WireError("varint longer than 10 bytes")


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


@dataclass(frozen=True)
class Field:
    """Declares one field of a :class:`Message`.

    *kind* is one of int32, int64, uint32, uint64, bool, enum, string, bytes
    or message; *target* names the enum or message class for those kinds.
    """

    number: int
    kind: str
    repeated: bool = False
    target: Optional[type] = None

    def __post_init__(self) -> None:
        if self.kind not in _VARINT_KINDS | _LENGTH_KINDS:
            raise ValueError(f"unknown field kind: {self.kind}")
        if not 1 <= self.number < (1 << 29):
            raise ValueError(f"invalid field number: {self.number}")
        if self.kind == "message" and self.target is None:
            raise ValueError("a message field needs a target class")

    def default(self) -> Any:
        if self.repeated:
            return []
        if self.kind == "message":
            return self.target()  # type: ignore[misc]
        if self.kind == "enum":
            if self.target is not None:
                try:
                    return self.target(0)
                except ValueError:
                    pass
            return 0
        if self.kind == "bool":
            return False
        if self.kind == "string":
            return ""
        if self.kind == "bytes":
            return b""
        return 0

    def to_varint(self, value: Any) -> int:
        if self.kind == "bool":
            return 1 if value else 0
        number = int(value)
        if self.kind in ("uint32", "uint64"):
            limit = _MASK32 if self.kind == "uint32" else _MASK64
            if not 0 <= number <= limit:
                raise ValueError(f"{self.kind} out of range: {number}")
            return number
        bits = 64 if self.kind == "int64" else 32
        if not -(1 << (bits - 1)) <= number < (1 << (bits - 1)):
            raise ValueError(f"{self.kind} out of range: {number}")
        return number & _MASK64

    def from_varint(self, raw: int) -> Any:
        if self.kind == "bool":
            return raw != 0
        if self.kind == "uint32":
            return raw & _MASK32
        if self.kind == "uint64":
            return raw
        if self.kind == "int64":
            return _signed(raw, 64)
        number = _signed(raw, 32)
        if self.kind == "enum" and self.target is not None:
            try:
                return self.target(number)
            except ValueError:
                return number
        return number

    def to_payload(self, value: Any) -> bytes:
        if self.kind == "string":
            if not isinstance(value, str):
                raise TypeError(f"string field needs str, got {type(value).__name__}")
            return value.encode("utf-8")
        if self.kind == "bytes":
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise TypeError(f"bytes field needs bytes, got {type(value).__name__}")
            return bytes(value)
        return value.to_bytes()

    def from_payload(self, payload: bytes) -> Any:
        if self.kind == "string":
            try:
                return payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise WireError(f"invalid UTF-8 in string field {self.number}") from exc
        if self.kind == "bytes":
            return payload
        return self.target.from_bytes(payload)  # type: ignore[union-attr]


def _key(number: int, wire_type: int) -> bytes:
    return encode_varint((number << 3) | wire_type)


def _read_length(data: bytes, pos: int) -> Tuple[bytes, int]:
    length, pos = decode_varint(data, pos)
    end = pos + length
    if end > len(data):
        raise WireError("truncated length-delimited field")
    return data[pos:end], end


def _skip(data: bytes, pos: int, wire_type: int) -> int:
    if wire_type == _WIRE_VARINT:
        return decode_varint(data, pos)[1]
    if wire_type == _WIRE_LENGTH:
        return _read_length(data, pos)[1]
    width = {_WIRE_FIXED64: 8, _WIRE_FIXED32: 4}.get(wire_type)
    if width is None:
        raise WireError(f"unsupported wire type {wire_type}")
    if pos + width > len(data):
        raise WireError("truncated fixed-width field")
    return pos + width


class Message:
    """Base class of messages declared with :class:`Field` class attributes."""

    _fields: ClassVar[Dict[str, Field]] = {}
    _by_number: ClassVar[Dict[int, Tuple[str, Field]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        fields = dict(cls._fields)
        fields.update(
            (name, value) for name, value in vars(cls).items() if isinstance(value, Field)
        )
        by_number: Dict[int, Tuple[str, Field]] = {}
        for name, field in fields.items():
            if field.number in by_number:
                raise TypeError(f"{cls.__name__}: field number {field.number} used twice")
            by_number[field.number] = (name, field)
        cls._fields = dict(sorted(fields.items(), key=lambda item: item[1].number))
        cls._by_number = by_number

    def __init__(self, **values: Any) -> None:
        for name, field in self._fields.items():
            setattr(self, name, field.default())
        for name, value in values.items():
            field = self._fields.get(name)
            if field is None:
                raise TypeError(f"{type(self).__name__} has no field {name!r}")
            setattr(self, name, list(value) if field.repeated else value)

    def to_bytes(self) -> bytes:
        """Encode the message in protocol-buffer wire format."""
        out = bytearray()
        for name, field in self._fields.items():
            value = getattr(self, name)
            if field.repeated:
                if field.kind in _VARINT_KINDS:
                    if value:
                        packed = b"".join(encode_varint(field.to_varint(v)) for v in value)
                        out += _key(field.number, _WIRE_LENGTH)
                        out += encode_varint(len(packed)) + packed
                else:
                    for item in value:
                        payload = field.to_payload(item)
                        out += _key(field.number, _WIRE_LENGTH)
                        out += encode_varint(len(payload)) + payload
            elif field.kind in _VARINT_KINDS:
                raw = field.to_varint(value)
                if raw:
                    out += _key(field.number, _WIRE_VARINT) + encode_varint(raw)
            elif value is not None:
                payload = field.to_payload(value)
                if payload:
                    out += _key(field.number, _WIRE_LENGTH)
                    out += encode_varint(len(payload)) + payload
        return bytes(out)

    @classmethod
    def from_bytes(cls: Type[M], data: bytes) -> M:
        """Decode a message; unknown fields are skipped."""
        data = bytes(data)
        message = cls()
        pos = 0
        while pos < len(data):
            key, pos = decode_varint(data, pos)
            number, wire_type = key >> 3, key & 7
            if number == 0:
                raise WireError("field number 0 is invalid")
            entry = cls._by_number.get(number)
            if entry is None:
                pos = _skip(data, pos, wire_type)
                continue
            name, field = entry
            if field.kind in _VARINT_KINDS:
                raws: List[int] = []
                if wire_type == _WIRE_VARINT:
                    raw, pos = decode_varint(data, pos)
                    raws.append(raw)
                elif wire_type == _WIRE_LENGTH and field.repeated:
                    packed, pos = _read_length(data, pos)
                    inner = 0
                    while inner < len(packed):
                        raw, inner = decode_varint(packed, inner)
                        raws.append(raw)
                else:
                    raise WireError(f"field {number}: unexpected wire type {wire_type}")
                values = [field.from_varint(raw) for raw in raws]
                if field.repeated:
                    getattr(message, name).extend(values)
                elif values:
                    setattr(message, name, values[-1])
            else:
                if wire_type != _WIRE_LENGTH:
                    raise WireError(f"field {number}: unexpected wire type {wire_type}")
                payload, pos = _read_length(data, pos)
                value = field.from_payload(payload)
                if field.repeated:
                    getattr(message, name).append(value)
                else:
                    setattr(message, name, value)
        return message

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self._fields)

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._fields)
        return f"{type(self).__name__}({parts})"


class RpcHeader(Message):
    """Names the called method and the size of its encoded arguments."""

    service_name = Field(1, "string")
    method_name = Field(2, "string")
    args_size = Field(3, "uint32")


def pack_request(service_name: str, method_name: str, args: bytes) -> bytes:
    """Frame a call: header length, header, then the encoded arguments."""
    header = RpcHeader(
        service_name=service_name, method_name=method_name, args_size=len(args)
    ).to_bytes()
    return _LENGTH_PREFIX.pack(len(header)) + header + bytes(args)


def unpack_request(data: bytes) -> Tuple[RpcHeader, bytes]:
    """Split a framed call into its header and encoded arguments."""
    data = bytes(data)
    if len(data) < _LENGTH_PREFIX.size:
        raise WireError("request shorter than its length prefix")
    (header_size,) = _LENGTH_PREFIX.unpack_from(data, 0)
    start = _LENGTH_PREFIX.size
    end = start + header_size
    if end > len(data):
        raise WireError("request header is truncated")
    header = RpcHeader.from_bytes(data[start:end])
    return header, data[end : end + header.args_size]