import enum
import re
import struct
from functools import lru_cache
from typing import Any

from .log import log


# Pre-allocating these prevents python from recreating the object on every read
# which saves a non-negligable amount of processing time.
_UINT8 = struct.Struct(">B")
_UINT16 = struct.Struct(">H")
_UINT32 = struct.Struct(">I")
_INT8 = struct.Struct(">b")
_INT32 = struct.Struct(">i")
_FLOAT = struct.Struct(">f")


def _read(fmt: struct.Struct, payload: bytes, offset: int) -> Any:
    if offset < 0 or offset + fmt.size > len(payload):
        return None
    return fmt.unpack_from(payload, offset)[0]


# All readers are big-endian and return None instead of raising when the field
# lies (even partially) outside of the payload. Older replays simply end early.
def read_uint8(payload: bytes, offset: int) -> int | None:
    return _read(_UINT8, payload, offset)


def read_uint16(payload: bytes, offset: int) -> int | None:
    return _read(_UINT16, payload, offset)


def read_uint32(payload: bytes, offset: int) -> int | None:
    return _read(_UINT32, payload, offset)


def read_int8(payload: bytes, offset: int) -> int | None:
    return _read(_INT8, payload, offset)


def read_int32(payload: bytes, offset: int) -> int | None:
    return _read(_INT32, payload, offset)


def read_float(payload: bytes, offset: int) -> float | None:
    return _read(_FLOAT, payload, offset)


def read_bool(payload: bytes, offset: int) -> bool | None:
    val = _read(_UINT8, payload, offset)
    return None if val is None else val != 0


def read_bytes(payload: bytes, offset: int, length: int) -> bytes | None:
    if offset < 0 or offset + length > len(payload):
        return None
    return bytes(payload[offset : offset + length])


def parse_version(version: str | None) -> tuple[int, ...] | None:
    """Converts a "major.minor.build" string into a comparable tuple"""
    if not version:
        return None
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return None


def version_at_least(version: str | None, minimum: tuple[int, ...]) -> bool:
    parsed = parse_version(version)
    return parsed is not None and parsed >= minimum


def _indent(s):
    return re.sub(r"^", "    ", s, flags=re.MULTILINE)


def _format_collection(coll, delim_open, delim_close):
    elements = [_format(x) for x in coll]
    if elements and "\n" in elements[0]:
        return delim_open + "\n" + ",\n".join(_indent(e) for e in elements) + delim_close
    else:
        return delim_open + ", ".join(elements) + delim_close


def _format(obj):
    if isinstance(obj, float):
        return "%.02f" % obj
    elif isinstance(obj, tuple):
        return _format_collection(obj, "(", ")")
    elif isinstance(obj, list):
        return _format_collection(obj, "[", "]")
    elif isinstance(obj, enum.Enum):
        return repr(obj)
    else:
        return str(obj)


class Base:
    __slots__ = ()

    def _attr_repr(self, attr):
        return attr + "=" + _format(getattr(self, attr))

    def __repr__(self):
        attrs = []
        for attr in dir(self):
            # uppercase names are nested classes
            if not callable(getattr(self, attr)) and not (attr.startswith("_") or attr[0].isupper()):
                s = self._attr_repr(attr)
                if s:
                    attrs.append(_indent(s))

        return "%s(\n%s)" % (self.__class__.__name__, ",\n".join(attrs))


class Enum(enum.Enum):
    def __repr__(self):
        return f"{self.value}:{self.name}"


class IntEnum(enum.IntEnum):
    def __repr__(self):
        return f"{self._value_}:{self._name_}"

    @classmethod
    def _missing_(cls, value):
        val_desc = f"0x{value:x}" if isinstance(value, int) else f"{value}"
        raise ValueError(f"{val_desc} is not a valid {cls.__name__}") from None


@lru_cache(maxsize=512)
def try_enum(enum_type, val) -> Enum | Any:
    """Attempts Enum(val). If the value is invalid, returns the given value."""
    try:
        return enum_type(val)
    except ValueError:
        log.info("unknown %s: %s" % (enum_type.__name__, val))
        return val
