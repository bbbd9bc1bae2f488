"""Output formats for listing tests: plain text or JSON."""

from __future__ import annotations

import enum
import io
import json
from typing import IO, Any, Optional, Union


class OutputFormatParseError(ValueError):
    """Raised when a string does not name a known output format."""

    def __init__(self, text: str) -> None:
        self.input = text
        super().__init__(
            f"unrecognized value for output format: {text!r} "
            f"(known values: {', '.join(OutputFormat.variants())})"
        )


class SerializableFormat(enum.Enum):
    """A machine-readable output format."""

    JSON = "json"
    JSON_PRETTY = "json-pretty"

    def to_writer(self, value: Any, writer: Union[IO[str], IO[bytes]]) -> None:
        """Write a JSON-serializable value to a text or binary stream in this format."""
        if self is SerializableFormat.JSON:
            text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        else:
            text = json.dumps(value, ensure_ascii=False, indent=2, separators=(",", ": "))
        if isinstance(writer, io.TextIOBase):
            writer.write(text)
        elif isinstance(writer, (io.RawIOBase, io.BufferedIOBase)):
            writer.write(text.encode("utf-8"))
        else:
            try:
                writer.write(text)  # type: ignore[arg-type]
            except TypeError:
                writer.write(text.encode("utf-8"))  # type: ignore[arg-type]


class OutputFormat(enum.Enum):
    """How a list of tests is written out. `PLAIN` is the default."""

    PLAIN = "plain"
    JSON = "json"
    JSON_PRETTY = "json-pretty"

    @classmethod
    def variants(cls) -> tuple[str, ...]:
        """Return the string forms of all known formats."""
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, text: str) -> "OutputFormat":
        """Parse a format name such as ``json-pretty``."""
        try:
            return cls(text)
        except ValueError:
            raise OutputFormatParseError(text) from None

    @property
    def serializable(self) -> Optional[SerializableFormat]:
        """The machine-readable format, or None for plain output."""
        if self is OutputFormat.PLAIN:
            return None
        return SerializableFormat(self.value)

    def __str__(self) -> str:
        return self.value