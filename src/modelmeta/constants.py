"""Constants and enumerations for modelmeta."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Uuid,
)

__all__ = [
    "ChangeKind",
    "FragmentKind",
    "MIXED_TYPE",
    "PRIMITIVE_TYPES",
    "REFERENCE_KEY_TYPE",
]


class ChangeKind(str, Enum):
    """Kind of entry recorded in an attribute change log."""

    INIT = "init"
    UPDATE = "update"


class FragmentKind(str, Enum):
    """Shape of a compiled schema fragment."""

    SCALAR = "scalar"
    REFERENCE = "reference"
    ARRAY = "array"
    ENUM = "enum"
    SUBSCHEMA = "subschema"
    MIXED = "mixed"


# Opaque storage type, accepts any JSON-storable value
MIXED_TYPE = JSON

# Storage type of a relation key (temporary ids are uuid4 strings)
REFERENCE_KEY_TYPE = String

# Known primitive identifiers. Both the storage-style names and the Python
# builtin names resolve, so metadata from either source compiles the same way.
PRIMITIVE_TYPES = MappingProxyType(
    {
        "String": String,
        "str": String,
        "Number": Float,
        "float": Float,
        "int": Integer,
        "Integer": Integer,
        "BigInt": BigInteger,
        "Boolean": Boolean,
        "bool": Boolean,
        "Date": DateTime,
        "datetime": DateTime,
        "date": Date,
        "Buffer": LargeBinary,
        "bytes": LargeBinary,
        "Decimal128": Numeric,
        "Decimal": Numeric,
        "UUID": Uuid,
        "Map": JSON,
        "dict": JSON,
        "Mixed": JSON,
    }
)
