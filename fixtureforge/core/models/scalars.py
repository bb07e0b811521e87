"""Fixed-width scalar types.

Python's ``int`` and ``float`` are unbounded / double precision. These
subclasses let a model declare a narrower scalar so the value provider can
generate values inside the matching range:

    class Packet(BaseModel):
        ttl: Byte
        port: Short
        checksum: Long
        flag: Char
        ratio: Float32
"""


class Byte(int):
    """8-bit signed integer."""

    MIN = -(2**7)
    MAX = 2**7 - 1


class Short(int):
    """16-bit signed integer."""

    MIN = -(2**15)
    MAX = 2**15 - 1


class Long(int):
    """64-bit signed integer."""

    MIN = -(2**63)
    MAX = 2**63 - 1


class Char(str):
    """Single character."""

    MIN = " "
    MAX = "~"


class Float32(float):
    """Single precision float (value range only, no rounding)."""

    MIN = -3.4028235e38
    MAX = 3.4028235e38


# Bounds used for the builtin scalars when a Range leaves one side open
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
DOUBLE_MIN = -1.7976931348623157e308
DOUBLE_MAX = 1.7976931348623157e308

FIXED_WIDTH_TYPES = (Byte, Short, Long, Char, Float32)
