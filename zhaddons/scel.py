"""Reader for .scel phrase dictionaries and a converter to a tab format."""

from __future__ import annotations

import getopt
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

HEADER = bytes([0x40, 0x15, 0, 0, 0x44, 0x43, 0x53, 0x01, 0x01, 0, 0, 0])
PINYIN_MARKER = bytes([0x9D, 0x01, 0, 0])
DELETED_MARKER = bytes([0x4C, 0, 0x54, 0, 0x42, 0, 0x4C, 0])

DESC_START = 0x130
DESC_LENGTH = 0x338 - 0x130
LDESC_LENGTH = 0x540 - 0x338
NEXT_LENGTH = 0x1540 - 0x540
MAX_SYMBOLS = 128
_DELETED_SYMCOUNT = 0x44
_DELETED_COUNT = 0x45

_USAGE = (
    "scel2org - Convert .scel file to libime compatible file (SEE NOTES BELOW)\n"
    "\n"
    "  usage: scel2org [OPTION] [scel file]\n"
    "\n"
    "  -o <file>  specify the output file, if not specified, the output will\n"
    "             be stdout.\n"
    "  -h         display this help.\n"
    "\n"
    "NOTES:\n"
    "   Always check the produced output for errors.\n"
)


class ScelFormatError(ValueError):
    """The data is not a well-formed .scel dictionary."""


@dataclass(frozen=True)
class ScelEntry:
    """One phrase and its pinyin syllables."""

    text: str
    pinyins: Tuple[str, ...]


@dataclass
class ScelDictionary:
    """Parsed contents of a .scel file."""

    description: str
    long_description: str
    next_description: str
    pinyins: List[str]
    entries: List[ScelEntry] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)


class _EndOfData(Exception):
    """Raised when the data ends where an end is acceptable."""


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    def read(self, size: int, error: Optional[str] = None) -> bytes:
        chunk = self._data[self.pos:self.pos + size]
        if len(chunk) != size:
            if error is None:
                raise _EndOfData
            raise ScelFormatError(error)
        self.pos += size
        return chunk

    def uint16(self, error: Optional[str] = None) -> int:
        return int.from_bytes(self.read(2, error), "little")


def decode_utf16(data: bytes) -> str:
    """Decode little-endian UTF-16 up to the first NUL code unit."""
    if len(data) % 2:
        raise ScelFormatError("Invalid size of string")
    end = len(data)
    for offset in range(0, len(data), 2):
        if data[offset] == 0 and data[offset + 1] == 0:
            end = offset
            break
    try:
        return data[:end].decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise ScelFormatError(f"Invalid UTF-16 string: {exc}") from exc


def _read_pinyins(reader: _Reader) -> List[str]:
    pinyins = []
    while True:
        reader.uint16("failed to read index")
        count = reader.uint16("failed to read pinyin count")
        pinyin = decode_utf16(reader.read(count, "Failed to read py"))
        if pinyin in ("lue", "nue"):
            pinyin = pinyin[0] + "ve"
        pinyins.append(pinyin)
        if pinyin == "zuo":
            return pinyins


def _read_words(reader: _Reader, result: ScelDictionary) -> bool:
    """Read phrase groups; return True when a deletion table may follow."""
    while True:
        symcount = reader.uint16()
        if symcount > MAX_SYMBOLS:
            logger.error("Error at offset: %d", reader.pos)
            return False
        count = reader.uint16("Failed to read count")
        if symcount == _DELETED_SYMCOUNT and count == _DELETED_COUNT:
            return True

        indices = [reader.uint16("Failed to read pyindex") for _ in range(count // 2)]
        if any(index >= len(result.pinyins) for index in indices):
            raise ScelFormatError("Invalid pinyin index")
        syllables = tuple(result.pinyins[index] for index in indices)

        for _ in range(symcount):
            size = reader.uint16("Failed to read count")
            text = decode_utf16(reader.read(size, "Failed to read text"))
            if syllables:
                result.entries.append(ScelEntry(text, syllables))
            extra = reader.uint16("failed to read count")
            reader.read(extra, "failed to read buf")


def _read_deleted(reader: _Reader, result: ScelDictionary) -> None:
    total = reader.uint16()
    for _ in range(total):
        size = (reader.uint16() * 2) & 0xFFFF
        result.deleted.append(decode_utf16(reader.read(size, "Failed to read text")))


def _parse(data: bytes, read_deleted: bool) -> ScelDictionary:
    reader = _Reader(bytes(data))
    if reader.read(len(HEADER), "Failed to read header") != HEADER:
        raise ScelFormatError("format error.")
    reader.pos = DESC_START
    description = decode_utf16(reader.read(DESC_LENGTH, "Failed to read description"))
    long_description = decode_utf16(
        reader.read(LDESC_LENGTH, "Failed to read long description")
    )
    next_description = decode_utf16(
        reader.read(NEXT_LENGTH, "Failed to read next description")
    )
    if reader.read(len(PINYIN_MARKER), "Failed to read py") != PINYIN_MARKER:
        raise ScelFormatError("Invalid pinyin table marker")

    result = ScelDictionary(
        description, long_description, next_description, _read_pinyins(reader)
    )
    try:
        if not _read_words(reader, result):
            return result
        try:
            marker = reader.read(len(DELETED_MARKER))
        except _EndOfData:
            return result
        if marker == DELETED_MARKER and read_deleted:
            _read_deleted(reader, result)
    except _EndOfData:
        pass
    return result


def parse_scel(data: bytes) -> ScelDictionary:
    """Parse the bytes of a .scel file, including its deletion table."""
    return _parse(data, read_deleted=True)


def read_scel(path: Union[str, Path]) -> ScelDictionary:
    """Read and parse a .scel file."""
    return parse_scel(Path(path).read_bytes())


def format_entries(entries: Iterable[ScelEntry]) -> str:
    """Format entries as ``text<TAB>py'py<TAB>0`` lines."""
    lines = []
    for entry in entries:
        pinyin = "'".join(entry.pinyins)
        lines.append(f"{entry.text}\t{pinyin}\t0\n")
    return "".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Convert a .scel file given on the command line."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, rest = getopt.gnu_getopt(args, "o:hd")
    except getopt.GetoptError:
        print(_USAGE)
        return 1

    output = None
    print_deleted = False
    for option, value in options:
        if option == "-o":
            output = value
        elif option == "-d":
            print_deleted = True
        else:
            print(_USAGE)
            return 1

    if not rest:
        print(_USAGE)
        return 1

    path = rest[0]
    try:
        data = Path(path).read_bytes()
    except OSError:
        print(f"Cannot open file: {path}", file=sys.stderr)
        return 1

    try:
        dictionary = _parse(data, read_deleted=print_deleted)
    except ScelFormatError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(f"DESC:{dictionary.description}", file=sys.stderr)
    print(f"LDESC:{dictionary.long_description}", file=sys.stderr)
    print(f"NEXT:{dictionary.next_description}", file=sys.stderr)

    text = format_entries(dictionary.entries)
    if output is None or output == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        with open(output, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)

    for word in dictionary.deleted:
        print(f"DEL:{word}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())