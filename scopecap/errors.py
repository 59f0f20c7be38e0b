"""
Exceptions raised while loading, decoding and emitting oscilloscope captures.

Every decode failure aborts the whole decode - callers never receive a
partially populated record. Exceptions carry the field name, byte offset and
raw value (where known) so a corrupt capture can be diagnosed from the message.
"""

from typing import Optional


class CaptureError(Exception):
    """Base class for all scopecap errors."""


class CaptureIOError(CaptureError):
    """Raised when the capture file cannot be read.

    The underlying ``OSError`` is chained via ``__cause__``.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")

    def __repr__(self) -> str:
        return f"CaptureIOError(path={self.path!r}, message={self.message!r})"


class DecodeError(CaptureError):
    """Base class for failures while interpreting capture bytes."""


class TruncatedInput(DecodeError):
    """Raised when the buffer ends before the layout is fully read.

    Attributes:
        field: Name of the field being read when the buffer ran out
        offset: Byte offset the read started at
        expected_bytes: Buffer length required to complete the read
        available_bytes: Actual buffer length
    """

    def __init__(self, field: str, offset: int, expected_bytes: int, available_bytes: int):
        self.field = field
        self.offset = offset
        self.expected_bytes = expected_bytes
        self.available_bytes = available_bytes
        super().__init__(
            f"{field} at offset {offset}: capture truncated "
            f"(need {expected_bytes} bytes, have {available_bytes})"
        )

    def __repr__(self) -> str:
        return (
            f"TruncatedInput(field={self.field!r}, offset={self.offset}, "
            f"expected_bytes={self.expected_bytes}, available_bytes={self.available_bytes})"
        )


class ScaleIndexOutOfRange(DecodeError):
    """Raised when a scale code does not index into its table.

    Attributes:
        field: Header field holding the code (e.g. "channel1_scale")
        table: Name of the lookup table ("time" or "voltage")
        index: Raw code read from the capture
        table_len: Number of entries in the table
        offset: Byte offset of the field, or None when resolved after decode
    """

    def __init__(self, field: str, table: str, index: int, table_len: int, offset: Optional[int] = None):
        self.field = field
        self.table = table
        self.index = index
        self.table_len = table_len
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"{field}{where}: scale index {index} out of range for {table} table (size {table_len})")

    def __repr__(self) -> str:
        return (
            f"ScaleIndexOutOfRange(field={self.field!r}, table={self.table!r}, index={self.index}, "
            f"table_len={self.table_len}, offset={self.offset})"
        )


class UnknownEnumCode(DecodeError):
    """Raised when an enumerated setting holds a code outside its closed set.

    Attributes:
        field_name: Header field holding the code (e.g. "trigger_edge")
        raw_code: Raw code read from the capture
        offset: Byte offset of the field, or None when resolved after decode
    """

    def __init__(self, field_name: str, raw_code: int, offset: Optional[int] = None, enum_name: Optional[str] = None):
        self.field_name = field_name
        self.raw_code = raw_code
        self.offset = offset
        self.enum_name = enum_name
        where = f" at offset {offset}" if offset is not None else ""
        kind = f" for {enum_name}" if enum_name else ""
        super().__init__(f"{field_name}{where}: unknown code {raw_code}{kind}")

    def __repr__(self) -> str:
        return f"UnknownEnumCode(field_name={self.field_name!r}, raw_code={self.raw_code}, offset={self.offset})"


class UnsupportedOutputMode(CaptureError):
    """Raised when the requested output mode is not ``raw`` or ``parsed``."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"The output mode {mode!r} is not supported")

    def __repr__(self) -> str:
        return f"UnsupportedOutputMode({self.mode!r})"


class SerializationError(CaptureError):
    """Raised when a decoded record cannot be turned into JSON.

    Indicates an internal inconsistency in the data model, not bad input.
    """
