"""Pinyin readings of Chinese characters from a binary table."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

# Longest UTF-8 sequence accepted for a single character.
_UTF8_MAX_LENGTH = 6

_VOKALS: Tuple[Tuple[str, str, str, str, str], ...] = (
    ("", "", "", "", ""),
    ("a", "ā", "á", "ǎ", "à"),
    ("ai", "āi", "ái", "ǎi", "ài"),
    ("an", "ān", "án", "ǎn", "àn"),
    ("ang", "āng", "áng", "ǎng", "àng"),
    ("ao", "āo", "áo", "ǎo", "ào"),
    ("e", "ē", "é", "ě", "è"),
    ("ei", "ēi", "éi", "ěi", "èi"),
    ("en", "ēn", "én", "ěn", "èn"),
    ("eng", "ēng", "éng", "ěng", "èng"),
    ("er", "ēr", "ér", "ěr", "èr"),
    ("i", "ī", "í", "ǐ", "ì"),
    ("ia", "iā", "iá", "iǎ", "ià"),
    ("ian", "iān", "ián", "iǎn", "iàn"),
    ("iang", "iāng", "iáng", "iǎng", "iàng"),
    ("iao", "iāo", "iáo", "iǎo", "iào"),
    ("ie", "iē", "ié", "iě", "iè"),
    ("in", "īn", "ín", "ǐn", "ìn"),
    ("ing", "īng", "íng", "ǐng", "ìng"),
    ("iong", "iōng", "ióng", "iǒng", "iòng"),
    ("iu", "iū", "iú", "iǔ", "iù"),
    ("m", "m", "m", "m", "m"),
    ("n", "n", "ń", "ň", "ǹ"),
    ("ng", "ng", "ńg", "ňg", "ǹg"),
    ("o", "ō", "ó", "ǒ", "ò"),
    ("ong", "ōng", "óng", "ǒng", "òng"),
    ("ou", "ōu", "óu", "ǒu", "òu"),
    ("u", "ū", "ú", "ǔ", "ù"),
    ("ua", "uā", "uá", "uǎ", "uà"),
    ("uai", "uāi", "uái", "uǎi", "uài"),
    ("uan", "uān", "uán", "uǎn", "uàn"),
    ("uang", "uāng", "uáng", "uǎng", "uàng"),
    ("ue", "uē", "ué", "uě", "uè"),
    ("ueng", "uēng", "uéng", "uěng", "uèng"),
    ("ui", "uī", "uí", "uǐ", "uì"),
    ("un", "ūn", "ún", "ǔn", "ùn"),
    ("uo", "uō", "uó", "uǒ", "uò"),
    ("ü", "ǖ", "ǘ", "ǚ", "ǜ"),
    ("üan", "üān", "üán", "üǎn", "üàn"),
    ("üe", "üē", "üé", "üě", "üè"),
    ("ün", "ǖn", "ǘn", "ǚn", "ǜn"),
)

_KONSONANTS: Tuple[str, ...] = (
    "", "b", "c", "ch", "d", "f", "g", "h", "j", "k", "l", "m", "n",
    "ng", "p", "q", "r", "s", "sh", "t", "w", "x", "y", "z", "zh",
)

Character = Union[int, str]


def get_vokal(index: int, tone: int) -> str:
    """Return the final for ``index`` marked with ``tone`` (0 for none)."""
    if not 0 <= index < len(_VOKALS):
        return ""
    if not 0 <= tone <= 4:
        tone = 0
    return _VOKALS[index][tone]


def get_konsonant(index: int) -> str:
    """Return the initial for ``index``."""
    if not 0 <= index < len(_KONSONANTS):
        return ""
    return _KONSONANTS[index]


def _code(hz: Character) -> int:
    return ord(hz) if isinstance(hz, str) else int(hz)


class PinyinLookup:
    """Character to pinyin table, loaded lazily from a binary file.

    The file is a sequence of records: a byte with the length of a UTF-8
    character, the character, a byte with the number of readings and three
    bytes (initial, final, tone) per reading.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._data: Dict[int, List[Tuple[int, int, int]]] = {}
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the table once; return whether it loaded successfully."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self._path is None:
            return False
        try:
            data = self._path.read_bytes()
        except OSError:
            return False
        self._load_result = self._parse(data)
        return self._load_result

    def _parse(self, data: bytes) -> bool:
        pos = 0
        while pos < len(data):
            word_len = data[pos]
            pos += 1
            if word_len > _UTF8_MAX_LENGTH:
                return False
            word = data[pos:pos + word_len]
            if len(word) != word_len:
                return False
            pos += word_len
            nul = word.find(b"\0")
            if nul >= 0:
                word = word[:nul]
            try:
                text = word.decode("utf-8")
            except UnicodeDecodeError:
                return False
            if len(text) != 1:
                return False
            if pos >= len(data):
                return False
            count = data[pos]
            pos += 1
            if count == 0:
                continue
            readings = self._data.setdefault(ord(text), [])
            for _ in range(count):
                record = data[pos:pos + 3]
                if len(record) != 3:
                    return False
                pos += 3
                readings.append((record[0], record[1], record[2]))
        return True

    def lookup(self, hz: Character) -> List[str]:
        """Toned pinyin readings of a character."""
        result = []
        for consonant, vocal, tone in self._data.get(_code(hz), ()):
            c = get_konsonant(consonant)
            v = get_vokal(vocal, tone)
            if not c and not v:
                continue
            result.append(c + v)
        return result

    def full_lookup(self, hz: Character) -> List[Tuple[str, str, int]]:
        """Readings as ``(toned pinyin, pinyin without tone, tone)`` tuples."""
        result = []
        for consonant, vocal, tone in self._data.get(_code(hz), ()):
            c = get_konsonant(consonant)
            v = get_vokal(vocal, tone)
            if not c and not v:
                continue
            result.append((c + v, c + get_vokal(vocal, 0), tone))
        return result