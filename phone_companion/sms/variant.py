"""
Typed access to loosely-typed records from the phone-sync daemon.

The daemon delivers each SMS as a positional structure of bus variants.
Nothing about the layout is self-describing, and different daemon and
phone versions disagree on integer widths (a thread id may arrive as
int32, uint64, ...) or omit trailing fields entirely.

Design Decisions:
    1. We never trust the producer's schema to be stable across versions
    2. Accessors never raise: absent or mismatched fields yield a default
    3. The position-to-meaning map lives in one place (MessageField)
    4. Narrowing conversions wrap like a native integer cast

Record layout (positions fixed by the producer):
    0  direction code   (int)
    1  body             (string)
    2  addresses        (array of single-string structs)
    3  date             (int64, ms since epoch)
    4  read flag        (int, 0/1)
    5  unused
    6  thread id        (int64)
    7, 8  unused
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Iterable, Optional, Tuple


class VariantKind(Enum):
    """Wire types a variant can carry."""

    BYTE = "y"
    BOOLEAN = "b"
    INT16 = "n"
    UINT16 = "q"
    INT32 = "i"
    UINT32 = "u"
    INT64 = "x"
    UINT64 = "t"
    DOUBLE = "d"
    STRING = "s"
    OBJECT_PATH = "o"
    SIGNATURE = "g"
    ARRAY = "a"
    STRUCT = "r"
    VARIANT = "v"


INTEGER_KINDS = frozenset(
    {
        VariantKind.BYTE,
        VariantKind.INT16,
        VariantKind.UINT16,
        VariantKind.INT32,
        VariantKind.UINT32,
        VariantKind.INT64,
        VariantKind.UINT64,
    }
)

STRING_KINDS = frozenset({VariantKind.STRING, VariantKind.OBJECT_PATH, VariantKind.SIGNATURE})


class MessageField(IntEnum):
    """Positions of the fields this consumer reads from an SMS record."""

    DIRECTION = 0
    BODY = 1
    ADDRESSES = 2
    DATE = 3
    READ = 4
    THREAD_ID = 6


@dataclass(frozen=True)
class Variant:
    """
    A tagged value as received from the bus.

    For ARRAY and STRUCT kinds, ``value`` is a tuple of Variants.
    For VARIANT (a boxed value), ``value`` is the inner Variant.
    """

    kind: VariantKind
    value: Any

    @classmethod
    def string(cls, value: str) -> "Variant":
        return cls(VariantKind.STRING, value)

    @classmethod
    def int32(cls, value: int) -> "Variant":
        return cls(VariantKind.INT32, value)

    @classmethod
    def int64(cls, value: int) -> "Variant":
        return cls(VariantKind.INT64, value)

    @classmethod
    def uint64(cls, value: int) -> "Variant":
        return cls(VariantKind.UINT64, value)

    @classmethod
    def boolean(cls, value: bool) -> "Variant":
        return cls(VariantKind.BOOLEAN, bool(value))

    @classmethod
    def struct(cls, *fields: "Variant") -> "Variant":
        return cls(VariantKind.STRUCT, tuple(fields))

    @classmethod
    def array(cls, items: Iterable["Variant"]) -> "Variant":
        return cls(VariantKind.ARRAY, tuple(items))

    @classmethod
    def boxed(cls, inner: "Variant") -> "Variant":
        return cls(VariantKind.VARIANT, inner)

    @classmethod
    def from_python(cls, obj: Any) -> "Variant":
        """
        Wrap a plain Python value.

        bool → BOOLEAN, int → INT64, float → DOUBLE, str → STRING,
        tuple → STRUCT, list → ARRAY. Variants pass through unchanged.

        Raises:
            TypeError: If the value has no variant representation.
        """
        if isinstance(obj, Variant):
            return obj
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.int64(obj)
        if isinstance(obj, float):
            return cls(VariantKind.DOUBLE, obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, tuple):
            return cls.struct(*(cls.from_python(item) for item in obj))
        if isinstance(obj, list):
            return cls.array(cls.from_python(item) for item in obj)
        raise TypeError(f"Cannot convert {type(obj).__name__} to Variant")

    @classmethod
    def from_json_record(cls, fields: Any) -> "Variant":
        """
        Build a record from its JSON transport form.

        JSON has no tuples, so nesting depth decides the container kind:
        the top-level list is a STRUCT, a list inside a struct is an ARRAY,
        a list inside an array is a STRUCT again. This reproduces the
        ``a(s)`` shape of the address field.

        ``null`` and objects become empty VARIANT boxes, which every
        accessor reads as absent. A top-level value that is not a list
        yields a non-struct Variant, so the message decoder drops it.
        """
        return cls._from_json(fields, as_struct=True)

    @classmethod
    def _from_json(cls, obj: Any, as_struct: bool) -> "Variant":
        if isinstance(obj, list):
            children = [cls._from_json(item, as_struct=not as_struct) for item in obj]
            return cls.struct(*children) if as_struct else cls.array(children)
        if obj is None or isinstance(obj, dict):
            return cls(VariantKind.VARIANT, None)
        return cls.from_python(obj)


def _unbox(value: Optional[Variant]) -> Optional[Variant]:
    """Strip any number of VARIANT boxes."""
    while value is not None and value.kind is VariantKind.VARIANT:
        value = value.value if isinstance(value.value, Variant) else None
    return value


def _wrap(value: int, bits: int) -> int:
    """Reinterpret an integer as a signed value of the given width."""
    mask = (1 << bits) - 1
    value &= mask
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _as_int(value: Optional[Variant]) -> Optional[int]:
    value = _unbox(value)
    if value is None or value.kind not in INTEGER_KINDS:
        return None
    if not isinstance(value.value, int) or isinstance(value.value, bool):
        return None
    return value.value


def get_int64(value: Optional[Variant], default: int = 0) -> int:
    """Read any integer kind as a signed 64-bit value."""
    raw = _as_int(value)
    return default if raw is None else _wrap(raw, 64)


def get_int32(value: Optional[Variant], default: int = 0) -> int:
    """Read any integer kind as a signed 32-bit value (wider values wrap)."""
    raw = _as_int(value)
    return default if raw is None else _wrap(raw, 32)


def get_bool(value: Optional[Variant], default: bool = False) -> bool:
    """Read a BOOLEAN, or any integer kind where non-zero means true."""
    inner = _unbox(value)
    if inner is not None and inner.kind is VariantKind.BOOLEAN:
        return bool(inner.value)
    raw = _as_int(inner)
    return default if raw is None else raw != 0


def get_string(value: Optional[Variant], default: str = "") -> str:
    value = _unbox(value)
    if value is None or value.kind not in STRING_KINDS or not isinstance(value.value, str):
        return default
    return value.value


def get_first_struct_string(value: Optional[Variant], default: str = "") -> str:
    """
    Pull the first string out of an array of single-field structures.

    Address lists arrive as ``a(s)``; some producers send a bare ``as``
    instead, so a non-struct element is read directly as a string.
    """
    value = _unbox(value)
    if value is None or value.kind is not VariantKind.ARRAY or not value.value:
        return default

    first = _unbox(value.value[0])
    if first is not None and first.kind is VariantKind.STRUCT:
        return get_string(field_at(first, 0), default)
    return get_string(first, default)


def struct_fields(record: Optional[Variant]) -> Optional[Tuple[Variant, ...]]:
    """Return the fields of a STRUCT record, or None for anything else."""
    record = _unbox(record)
    if record is None or record.kind is not VariantKind.STRUCT:
        return None
    return record.value


def field_at(record: Optional[Variant], index: int) -> Optional[Variant]:
    """
    Get the positional field of a struct.

    Returns:
        The field, or None if the record is not a struct or is too short.
    """
    fields = struct_fields(record)
    if fields is None or not 0 <= index < len(fields):
        return None
    return fields[index]


def encode_addresses(recipients: Iterable[str]) -> Variant:
    """
    Encode recipients in the ``a(s)`` shape the daemon expects.

    Order and duplicates are preserved: a group thread is matched on its
    exact address list.
    """
    return Variant.array(Variant.struct(Variant.string(addr)) for addr in recipients)
