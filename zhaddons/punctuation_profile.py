"""Punctuation mapping profiles for one language."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

PROFILE_PREFIX = "punc.mb."

_WHITESPACE = " \t\r\n\v\f"
_SPLIT = re.compile("[" + re.escape(_WHITESPACE) + "]+")

Character = Union[int, str]


@dataclass(frozen=True)
class PunctuationEntry:
    """One mapping of a key character to one or two punctuation strings."""

    key: str
    mapping: str
    alt_mapping: str = ""


def _is_valid(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _code(unicode: Character) -> int:
    return ord(unicode) if isinstance(unicode, str) else int(unicode)


class PunctuationProfile:
    """Mapping from typed characters to punctuation for one language.

    A key may carry several mappings; a mapping with an alternative forms a
    pair, such as opening and closing quotes.
    """

    def __init__(self) -> None:
        self._map: Dict[int, List[Tuple[str, str]]] = {}
        self._entries: List[PunctuationEntry] = []
        self._defaults: List[PunctuationEntry] = []

    def _clear(self) -> None:
        self._map.clear()
        self._entries = []

    def _add_entry(self, key: int, value: str, value2: str) -> None:
        self._map.setdefault(key, []).append((value, value2))
        self._entries.append(PunctuationEntry(chr(key), value, value2))

    def load(self, lines: Iterable[str]) -> None:
        """Replace the mappings with ``key mapping [alt]`` lines.

        ``#`` is an ordinary key character, not a comment.
        """
        self._clear()
        for line in lines:
            if not line.strip(_WHITESPACE):
                continue
            tokens = [token for token in _SPLIT.split(line) if token]
            if len(tokens) not in (2, 3):
                continue
            if not any(_is_valid(token) for token in tokens):
                continue
            key = tokens[0]
            if not _is_valid(key) or len(key) != 1:
                continue
            self._add_entry(ord(key), tokens[1], tokens[2] if len(tokens) > 2 else "")

    def load_system(self, lines: Iterable[str]) -> None:
        """Load lines and make them the default entries."""
        self.load(lines)
        self._defaults = list(self._entries)

    def reset_default_value(self) -> None:
        """Drop all entries and defaults."""
        self._clear()
        self._defaults = []

    def set_entries(self, entries: Iterable[PunctuationEntry]) -> None:
        """Replace the mappings, skipping entries without a single-character
        key or without a mapping."""
        entries = list(entries)
        self._clear()
        for entry in entries:
            if not entry.key or not entry.mapping:
                continue
            if not _is_valid(entry.key) or len(entry.key) != 1:
                continue
            self._add_entry(ord(entry.key), entry.mapping, entry.alt_mapping)

    def entries(self) -> List[PunctuationEntry]:
        """Current entries in the order they were added."""
        return list(self._entries)

    def default_entries(self) -> List[PunctuationEntry]:
        """Entries loaded from the system profile."""
        return list(self._defaults)

    def dumps(self) -> str:
        """Render the entries in the profile file format."""
        lines = []
        for entry in self._entries:
            line = f"{entry.key} {entry.mapping}"
            if entry.alt_mapping:
                line += f" {entry.alt_mapping}"
            lines.append(line + "\n")
        return "".join(lines)

    def save(self, path: Union[str, Path]) -> None:
        """Write the entries to ``path``, replacing it atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name + ".")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(self.dumps())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def get_punctuation(self, unicode: Character) -> Tuple[str, str]:
        """First mapping for a key as ``(mapping, alt)``, or empty strings."""
        values = self._map.get(_code(unicode))
        if not values:
            return ("", "")
        return values[0]

    def get_punctuations(self, unicode: Character) -> List[str]:
        """All candidate strings for a key.

        A key with a single mapping yields only that mapping, so a lone
        paired symbol still works.
        """
        values = self._map.get(_code(unicode))
        if not values:
            return []
        if len(values) == 1:
            return [values[0][0]]
        result = []
        for first, second in values:
            result.append(first)
            if second:
                result.append(second)
        return result