"""Conversion between Simplified and Traditional Chinese."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union


class ChttransIMType(Enum):
    """Script an input method produces, or is converted to."""

    SIMP = "simp"
    TRAD = "trad"
    OTHER = "other"


class ChttransEngine(Enum):
    """Available conversion engines."""

    NATIVE = "Native"
    OPENCC = "OpenCC"


@dataclass(frozen=True)
class TextSegment:
    """A run of formatted text in a preedit or panel string."""

    text: str
    format: Any = 0


def _is_valid_char(ch: str) -> bool:
    return not 0xD800 <= ord(ch) <= 0xDFFF


def _is_valid_text(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class ChttransBackend:
    """Base for conversion backends with lazy, one-time loading."""

    def __init__(self) -> None:
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the backend once; return whether it is usable."""
        if not self._loaded:
            self._load_result = bool(self._load_once())
            self._loaded = True
        return self._load_result

    def loaded(self) -> bool:
        """Whether the backend has been loaded successfully."""
        return self._loaded and self._load_result

    def _load_once(self) -> bool:
        raise NotImplementedError

    def convert_simp_to_trad(self, text: str) -> str:
        raise NotImplementedError

    def convert_trad_to_simp(self, text: str) -> str:
        raise NotImplementedError


class NativeBackend(ChttransBackend):
    """Character-by-character conversion from a two-column table.

    Every line of the table starts with a simplified character followed by
    its traditional form. The first mapping seen for a character wins.
    """

    def __init__(self, table_path: Optional[Union[str, Path]] = None) -> None:
        super().__init__()
        self._table_path = Path(table_path) if table_path is not None else None
        self._s2t: Dict[str, str] = {}
        self._t2s: Dict[str, str] = {}

    def _add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            line = line.rstrip("\n")
            if len(line) < 2:
                continue
            simp, trad = line[0], line[1]
            if not _is_valid_char(simp) or not _is_valid_char(trad):
                continue
            self._s2t.setdefault(simp, trad)
            self._t2s.setdefault(trad, simp)

    def _load_once(self) -> bool:
        if self._table_path is None:
            return False
        try:
            data = self._table_path.read_bytes()
        except OSError:
            return False
        self._add_lines(
            raw.decode("utf-8", errors="surrogateescape") for raw in data.split(b"\n")
        )
        return True

    def load_lines(self, lines: Iterable[str]) -> None:
        """Fill the tables from ``lines`` and mark the backend as loaded."""
        self._add_lines(lines)
        self._loaded = True
        self._load_result = True

    @staticmethod
    def _convert(table: Mapping[str, str], text: str) -> str:
        return "".join(table.get(ch, ch) for ch in text)

    def convert_simp_to_trad(self, text: str) -> str:
        return self._convert(self._s2t, text)

    def convert_trad_to_simp(self, text: str) -> str:
        return self._convert(self._t2s, text)


def input_method_entry_type(language_code: str) -> ChttransIMType:
    """Classify an input method by its language code."""
    if language_code == "zh_CN":
        return ChttransIMType.SIMP
    if language_code in ("zh_HK", "zh_TW"):
        return ChttransIMType.TRAD
    return ChttransIMType.OTHER


def _swap(im_type: ChttransIMType) -> ChttransIMType:
    return ChttransIMType.TRAD if im_type is ChttransIMType.SIMP else ChttransIMType.SIMP


class Chttrans:
    """Per-input-method Simplified/Traditional conversion state.

    Input methods are identified by their unique name together with their
    language code. Conversion is active for the names in the enabled set.
    """

    def __init__(
        self,
        backends: Mapping[ChttransEngine, ChttransBackend],
        engine: ChttransEngine = ChttransEngine.NATIVE,
        enabled_im: Iterable[str] = (),
    ) -> None:
        self._backends = dict(backends)
        self._enabled_im = set(enabled_im)
        backend = self._backends.get(engine)
        if backend is None and engine is not ChttransEngine.NATIVE:
            backend = self._backends.get(ChttransEngine.NATIVE)
        self._backend = backend

    def enabled_im(self) -> List[str]:
        """Names of input methods with conversion turned on, sorted."""
        return sorted(self._enabled_im)

    def input_method_type(self, name: Optional[str], language_code: str) -> ChttransIMType:
        """Script the input method itself produces."""
        if not name:
            return ChttransIMType.OTHER
        return input_method_entry_type(language_code)

    def convert_type(self, name: Optional[str], language_code: str) -> ChttransIMType:
        """Script to convert output to, or OTHER when no conversion applies."""
        im_type = self.input_method_type(name, language_code)
        if im_type is ChttransIMType.OTHER or name not in self._enabled_im:
            return ChttransIMType.OTHER
        return _swap(im_type)

    def current_type(self, name: Optional[str], language_code: str) -> ChttransIMType:
        """Script the user currently gets, considering conversion."""
        im_type = self.input_method_type(name, language_code)
        if im_type is ChttransIMType.OTHER:
            return ChttransIMType.OTHER
        if name not in self._enabled_im:
            return im_type
        return _swap(im_type)

    def toggle(self, name: Optional[str], language_code: str) -> ChttransIMType:
        """Flip conversion for an input method; return the new current type."""
        if self.input_method_type(name, language_code) is not ChttransIMType.OTHER:
            if name in self._enabled_im:
                self._enabled_im.discard(name)
            else:
                self._enabled_im.add(name)
        return self.current_type(name, language_code)

    def convert(self, im_type: ChttransIMType, text: str) -> str:
        """Convert ``text`` to the script ``im_type`` using the active backend."""
        if self._backend is None or not self._backend.load():
            return text
        if im_type is ChttransIMType.TRAD:
            return self._backend.convert_simp_to_trad(text)
        return self._backend.convert_trad_to_simp(text)

    def filter_commit(self, name: Optional[str], language_code: str, text: str) -> str:
        """Convert text about to be committed."""
        im_type = self.convert_type(name, language_code)
        if im_type is ChttransIMType.OTHER:
            return text
        return self.convert(im_type, text)

    def filter_output(
        self,
        name: Optional[str],
        language_code: str,
        segments: Sequence[TextSegment],
        cursor: int,
    ) -> Tuple[List[TextSegment], int]:
        """Convert formatted text, keeping segment formats and the cursor.

        ``cursor`` is a character offset; values of zero or below are kept.
        """
        unchanged = (list(segments), cursor)
        if not segments:
            return unchanged
        im_type = self.convert_type(name, language_code)
        if im_type is ChttransIMType.OTHER:
            return unchanged
        old_string = "".join(segment.text for segment in segments)
        if not _is_valid_text(old_string):
            return unchanged
        new_string = self.convert(im_type, old_string)
        if not _is_valid_text(new_string):
            return unchanged

        if len(segments) == 1:
            result = [TextSegment(new_string, segments[0].format)]
        else:
            result = []
            offset = 0
            for segment in segments:
                length = min(len(segment.text), len(new_string) - offset)
                result.append(
                    TextSegment(new_string[offset:offset + length], segment.format)
                )
                offset += length

        if cursor > 0:
            cursor = min(cursor, len(new_string))
        return result, cursor