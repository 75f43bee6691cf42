"""
Decoding of .NET metadata blobs (ECMA-335 partition II, 23.2 and 23.3).

Only the two blob kinds needed to recover attribute arguments are handled:
method signatures of attribute constructors, and custom attribute values.

Type descriptors are plain strings ("string", "i4", "bool", "type", "enum",
"object", ...) or ("array", element_type) tuples.
"""

import struct
from typing import Any

from upcoming_changes.exceptions import MetadataFormatError

ELEMENT_TYPES = {
    0x02: "bool",
    0x03: "char",
    0x04: "i1",
    0x05: "u1",
    0x06: "i2",
    0x07: "u2",
    0x08: "i4",
    0x09: "u4",
    0x0A: "i8",
    0x0B: "u8",
    0x0C: "r4",
    0x0D: "r8",
    0x0E: "string",
}

_STRUCT_FORMATS = {
    "bool": "<?",
    "char": "<H",
    "i1": "<b",
    "u1": "<B",
    "i2": "<h",
    "u2": "<H",
    "i4": "<i",
    "u4": "<I",
    "i8": "<q",
    "u8": "<Q",
    "r4": "<f",
    "r8": "<d",
}

ELEMENT_TYPE_VOID = 0x01
ELEMENT_TYPE_VALUETYPE = 0x11
ELEMENT_TYPE_CLASS = 0x12
ELEMENT_TYPE_OBJECT = 0x1C
ELEMENT_TYPE_SZARRAY = 0x1D
ELEMENT_TYPE_CMOD_REQD = 0x1F
ELEMENT_TYPE_CMOD_OPT = 0x20
SERIALIZATION_TYPE_TYPE = 0x50
SERIALIZATION_TYPE_TAGGED_OBJECT = 0x51
SERIALIZATION_TYPE_FIELD = 0x53
SERIALIZATION_TYPE_PROPERTY = 0x54
SERIALIZATION_TYPE_ENUM = 0x55

SIGNATURE_GENERIC = 0x10
CUSTOM_ATTRIBUTE_PROLOG = 0x0001


class BlobReader:
    """Sequential reader over a metadata blob."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def read_bytes(self, count: int) -> bytes:
        if self.pos + count > len(self.data):
            raise MetadataFormatError(
                f"blob truncated: need {count} byte(s) at offset {self.pos}, "
                f"have {len(self.data) - self.pos}"
            )
        chunk = self.data[self.pos : self.pos + count]
        self.pos += count
        return chunk

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_struct(self, fmt: str) -> Any:
        return struct.unpack(fmt, self.read_bytes(struct.calcsize(fmt)))[0]

    def read_compressed(self) -> int:
        """Read a compressed unsigned integer (II.23.2)."""
        first = self.read_byte()
        if first & 0x80 == 0:
            return first
        if first & 0xC0 == 0x80:
            return ((first & 0x3F) << 8) | self.read_byte()
        if first & 0xE0 == 0xC0:
            rest = self.read_bytes(3)
            return ((first & 0x1F) << 24) | (rest[0] << 16) | (rest[1] << 8) | rest[2]
        raise MetadataFormatError(f"invalid compressed integer 0x{first:02x}")

    def read_ser_string(self) -> str | None:
        """Read a SerString; 0xFF encodes a null string."""
        if self.pos < len(self.data) and self.data[self.pos] == 0xFF:
            self.pos += 1
            return None
        length = self.read_compressed()
        return self.read_bytes(length).decode("utf-8")


def _read_signature_type(reader: BlobReader) -> Any:
    tag = reader.read_byte()
    while tag in (ELEMENT_TYPE_CMOD_REQD, ELEMENT_TYPE_CMOD_OPT):
        reader.read_compressed()
        tag = reader.read_byte()

    if tag == ELEMENT_TYPE_VOID:
        return "void"
    if tag in ELEMENT_TYPES:
        return ELEMENT_TYPES[tag]
    if tag == ELEMENT_TYPE_OBJECT:
        return "object"
    if tag == ELEMENT_TYPE_SZARRAY:
        return ("array", _read_signature_type(reader))
    if tag == ELEMENT_TYPE_VALUETYPE:
        # Value types are only legal in attribute constructors as enums
        reader.read_compressed()
        return "enum"
    if tag == ELEMENT_TYPE_CLASS:
        # The only class type legal in attribute constructors is System.Type
        reader.read_compressed()
        return "type"
    raise MetadataFormatError(f"unsupported element type 0x{tag:02x} in signature")


def parse_method_signature(blob: bytes) -> list[Any]:
    """
    Return the parameter types of a method signature.

    Args:
        blob: MethodDefSig / MethodRefSig blob

    Returns:
        List of type descriptors, one per parameter
    """
    reader = BlobReader(blob)
    flags = reader.read_byte()
    if flags & SIGNATURE_GENERIC:
        reader.read_compressed()
    count = reader.read_compressed()
    _read_signature_type(reader)  # return type
    return [_read_signature_type(reader) for _ in range(count)]


def _read_serialization_type(reader: BlobReader) -> Any:
    tag = reader.read_byte()
    if tag in ELEMENT_TYPES:
        return ELEMENT_TYPES[tag]
    if tag == ELEMENT_TYPE_SZARRAY:
        return ("array", _read_serialization_type(reader))
    if tag == SERIALIZATION_TYPE_TYPE:
        return "type"
    if tag == SERIALIZATION_TYPE_TAGGED_OBJECT:
        return "object"
    if tag == SERIALIZATION_TYPE_ENUM:
        reader.read_ser_string()  # enum type name
        return "enum"
    raise MetadataFormatError(f"unsupported serialization type 0x{tag:02x}")


def _read_value(reader: BlobReader, value_type: Any) -> Any:
    if isinstance(value_type, tuple):
        count = reader.read_struct("<I")
        if count == 0xFFFFFFFF:
            return None
        return [_read_value(reader, value_type[1]) for _ in range(count)]
    if value_type in ("string", "type"):
        return reader.read_ser_string()
    if value_type == "enum":
        # Underlying type is not recorded in the blob; attribute enums are int32
        return reader.read_struct("<i")
    if value_type == "object":
        return _read_value(reader, _read_serialization_type(reader))
    if value_type == "char":
        return chr(reader.read_struct("<H"))
    if value_type in _STRUCT_FORMATS:
        return reader.read_struct(_STRUCT_FORMATS[value_type])
    raise MetadataFormatError(f"cannot decode value of type {value_type!r}")


def decode_custom_attribute(
    blob: bytes, parameter_types: list[Any]
) -> tuple[list[Any], dict[str, Any]]:
    """
    Decode a custom attribute value blob.

    Args:
        blob: CustomAttribute.Value blob
        parameter_types: Constructor parameter types from parse_method_signature()

    Returns:
        Tuple of (positional arguments, named arguments)

    Raises:
        MetadataFormatError: If the blob is malformed
    """
    if not blob:
        return [], {}

    reader = BlobReader(blob)
    prolog = reader.read_struct("<H")
    if prolog != CUSTOM_ATTRIBUTE_PROLOG:
        raise MetadataFormatError(f"bad custom attribute prolog 0x{prolog:04x}")

    arguments = [_read_value(reader, value_type) for value_type in parameter_types]

    named_arguments: dict[str, Any] = {}
    count = reader.read_struct("<H")
    for _ in range(count):
        kind = reader.read_byte()
        if kind not in (SERIALIZATION_TYPE_FIELD, SERIALIZATION_TYPE_PROPERTY):
            raise MetadataFormatError(f"bad named argument kind 0x{kind:02x}")
        value_type = _read_serialization_type(reader)
        name = reader.read_ser_string()
        named_arguments[name] = _read_value(reader, value_type)

    return arguments, named_arguments
