"""Character pinyin and stroke helpers."""

from __future__ import annotations

from typing import List, Optional, Tuple

from .pinyinlookup import Character, PinyinLookup
from .stroke import Stroke

_STROKE_DIGITS = frozenset("12345")
_STROKE_LETTERS = {"h": "1", "s": "2", "p": "3", "n": "4", "z": "5"}
# Hard limit on characters looked up for one query.
_DUYIN_LIMIT = 20
DUYIN_KEYWORD = "duyin"


def _is_valid(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class PinyinHelper:
    """Front end over the pinyin table and the stroke dictionary."""

    def __init__(
        self,
        pinyin_lookup: Optional[PinyinLookup] = None,
        stroke: Optional[Stroke] = None,
    ) -> None:
        self._lookup = pinyin_lookup if pinyin_lookup is not None else PinyinLookup()
        self._stroke = stroke if stroke is not None else Stroke()

    def lookup(self, hz: Character) -> List[str]:
        """Toned pinyin readings of a character."""
        if self._lookup.load():
            return self._lookup.lookup(hz)
        return []

    def full_lookup(self, hz: Character) -> List[Tuple[str, str, int]]:
        """Readings as ``(toned pinyin, pinyin without tone, tone)``."""
        if self._lookup.load():
            return self._lookup.full_lookup(hz)
        return []

    def lookup_stroke(self, strokes: str, limit: int) -> List[Tuple[str, str]]:
        """Look up characters by digits 1-5 or by the letters h, s, p, n, z."""
        if not strokes or not self._stroke.load():
            return []
        if strokes[0] in _STROKE_DIGITS:
            if not all(c in _STROKE_DIGITS for c in strokes):
                return []
            return self._stroke.lookup(strokes, limit)
        if strokes[0] in _STROKE_LETTERS:
            if not all(c in _STROKE_LETTERS for c in strokes):
                return []
            converted = "".join(_STROKE_LETTERS[c] for c in strokes)
            return self._stroke.lookup(converted, limit)
        return []

    def reverse_lookup_stroke(self, hanzi: str) -> str:
        """Stroke sequence of a character, or an empty string."""
        if not self._stroke.load():
            return ""
        return self._stroke.reverse_lookup(hanzi)

    def pretty_stroke_string(self, strokes: str) -> str:
        """Render a digit stroke sequence with stroke glyphs."""
        if not self._stroke.load():
            return ""
        return self._stroke.pretty_string(strokes)

    def duyin_candidates(
        self,
        query: str,
        selected: Optional[str] = None,
        primary: Optional[str] = None,
        clipboard: Optional[str] = None,
    ) -> Optional[List[str]]:
        """Quick-phrase candidates showing the readings of selected text.

        ``selected`` is the selection in the surrounding text; ``primary``
        and ``clipboard`` are the selection buffers, both ``None`` when no
        clipboard is available. Returns ``None`` when the query is not
        handled, otherwise the candidate strings.
        """
        if query != DUYIN_KEYWORD:
            return None
        sources: List[str] = []
        if selected:
            sources.append(selected)
        if primary is not None or clipboard is not None:
            if not sources and (primary or "") not in sources:
                sources.append(primary or "")
            if (clipboard or "") not in sources:
                sources.append(clipboard or "")
        if not sources:
            return None

        candidates = []
        for text in sources:
            if not _is_valid(text):
                continue
            for counter, ch in enumerate(text):
                readings = self.lookup(ch)
                if readings:
                    candidates.append(f"{ch} ({', '.join(readings)})")
                if counter >= _DUYIN_LIMIT:
                    break
        return candidates