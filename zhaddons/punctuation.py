"""Full-width punctuation conversion with paired-symbol tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .punctuation_profile import PROFILE_PREFIX, PunctuationProfile

logger = logging.getLogger(__name__)

_MAP_PATH_PREFIX = "punctuationmap/"
_NOT_CONVERTED_WHEN_EN = frozenset((ord("."), ord(",")))

Character = Union[int, str]
PathLike = Union[str, Path]


def _code(unicode: Character) -> int:
    return ord(unicode) if isinstance(unicode, str) else int(unicode)


def _is_ascii_alnum(ch: str) -> bool:
    return len(ch) == 1 and ch.isascii() and ch.isalnum()


def _is_valid(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def lang_by_path(path: str) -> str:
    """Language of a ``punctuationmap/<lang>`` sub-configuration path."""
    if path.startswith(_MAP_PATH_PREFIX):
        return path[len(_MAP_PATH_PREFIX):]
    return ""


@dataclass
class PunctuationConfig:
    """User options of the punctuation converter."""

    enabled: bool = True
    half_width_punc_after_latin_or_number: bool = True
    type_paired_punctuation_together: bool = False


@dataclass
class PunctuationState:
    """Per-input-context conversion state."""

    last_punc_stack: Dict[int, str] = field(default_factory=dict)
    last_is_eng_or_digit: str = ""
    not_converted: int = 0
    may_rebuild_state_from_surrounding_text: bool = False
    last_punc_stack_backup: Dict[int, str] = field(default_factory=dict)
    not_converted_backup: int = 0


def _profile_files(directory: Optional[PathLike]) -> Dict[str, Path]:
    if directory is None:
        return {}
    root = Path(directory)
    if not root.is_dir():
        return {}
    return {
        entry.name: entry
        for entry in sorted(root.iterdir())
        if entry.name.startswith(PROFILE_PREFIX) and entry.is_file()
    }


def _read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8", errors="surrogateescape").split("\n")


class Punctuation:
    """Converts typed characters to punctuation of a language."""

    def __init__(
        self,
        config: Optional[PunctuationConfig] = None,
        profiles: Optional[Mapping[str, PunctuationProfile]] = None,
    ) -> None:
        self.config = config if config is not None else PunctuationConfig()
        self.profiles: Dict[str, PunctuationProfile] = dict(profiles or {})

    def load_profiles(
        self, system_dir: Optional[PathLike] = None, user_dir: Optional[PathLike] = None
    ) -> None:
        """Rebuild profiles from ``punc.mb.<lang>`` files.

        A system file provides the defaults; a user file of the same name is
        loaded over it.
        """
        system_files = _profile_files(system_dir)
        user_files = _profile_files(user_dir)
        names = sorted(set(system_files) | set(user_files))
        profiles: Dict[str, PunctuationProfile] = {}
        for name in names:
            if len(name) <= len(PROFILE_PREFIX):
                continue
            lang = name[len(PROFILE_PREFIX):]
            profile = profiles.setdefault(lang, PunctuationProfile())
            try:
                system_file = system_files.get(name)
                if system_file is not None:
                    profile.load_system(_read_lines(system_file))
                else:
                    profile.reset_default_value()
                user_file = user_files.get(name)
                if user_file is not None and user_file != system_file:
                    profile.load(_read_lines(user_file))
            except OSError as exc:
                logger.warning("Error when load profile %s: %s", name, exc)
        self.profiles = profiles

    def enabled(self) -> bool:
        return self.config.enabled

    def set_enabled(self, enabled: bool) -> None:
        self.config.enabled = bool(enabled)

    def profile_for_path(self, path: str) -> Optional[PunctuationProfile]:
        """Profile addressed by a ``punctuationmap/<lang>`` path, if any."""
        lang = lang_by_path(path)
        if not lang:
            return None
        return self.profiles.get(lang)

    def get_punctuation(self, language: str, unicode: Character) -> Tuple[str, str]:
        """First mapping of a key as ``(mapping, alt)``."""
        if not self.config.enabled:
            return ("", "")
        profile = self.profiles.get(language)
        if profile is None:
            return ("", "")
        return profile.get_punctuation(_code(unicode))

    def get_punctuations(self, language: str, unicode: Character) -> List[str]:
        """All candidate strings of a key."""
        if not self.config.enabled:
            return []
        profile = self.profiles.get(language)
        if profile is None:
            return []
        return profile.get_punctuations(_code(unicode))

    def _skip_after_latin(self, state: PunctuationState, code: int) -> bool:
        if (
            state.last_is_eng_or_digit
            and self.config.half_width_punc_after_latin_or_number
            and code in _NOT_CONVERTED_WHEN_EN
        ):
            state.not_converted = code
            return True
        return False

    def push_punctuation(
        self, language: str, state: PunctuationState, unicode: Character
    ) -> str:
        """Punctuation for a typed key, alternating paired symbols."""
        if not self.enabled():
            return ""
        code = _code(unicode)
        if self._skip_after_latin(state, code):
            return ""
        if language not in self.profiles:
            return ""
        first, second = self.get_punctuation(language, code)
        state.not_converted = 0
        if not second:
            return first
        if code in state.last_punc_stack:
            del state.last_punc_stack[code]
            return second
        state.last_punc_stack[code] = first
        return first

    def push_punctuation_v2(
        self, language: str, state: PunctuationState, unicode: Character
    ) -> Tuple[str, str]:
        """Like :meth:`push_punctuation`, returning ``(text, closing)``.

        ``closing`` is set only when paired symbols are typed together.
        """
        if not self.enabled():
            return ("", "")
        code = _code(unicode)
        if self._skip_after_latin(state, code):
            return ("", "")
        if language not in self.profiles:
            return ("", "")
        first, second = self.get_punctuation(language, code)
        state.not_converted = 0
        if not second:
            return (first, "")
        if self.config.type_paired_punctuation_together:
            return (first, second)
        if code in state.last_punc_stack:
            del state.last_punc_stack[code]
            return (second, "")
        state.last_punc_stack[code] = first
        return (first, "")

    def cancel_last(self, language: str, state: PunctuationState) -> str:
        """Full-width form of a key left half width after latin text."""
        if not self.enabled():
            return ""
        if state.not_converted in _NOT_CONVERTED_WHEN_EN:
            first, _ = self.get_punctuation(language, state.not_converted)
            state.not_converted = 0
            return first
        return ""

    def get_punctuation_candidates(self, language: str, unicode: Character) -> List[str]:
        """Candidates offered for a key."""
        if not self.enabled() or language not in self.profiles:
            return []
        return self.get_punctuations(language, unicode)

    def on_commit(self, state: PunctuationState, sentence: str) -> None:
        """Remember whether committed text ended in an ASCII letter or digit."""
        if sentence and _is_ascii_alnum(sentence[-1]):
            state.last_is_eng_or_digit = sentence[-1]
        else:
            state.last_is_eng_or_digit = ""

    def on_key(
        self, state: PunctuationState, char: Optional[str], accepted: bool = False
    ) -> None:
        """Track a key press not consumed by the input method.

        ``char`` is the character the key produces, or ``None``.
        """
        if accepted:
            return
        if char is not None and _is_ascii_alnum(char):
            state.last_is_eng_or_digit = char
        else:
            state.last_is_eng_or_digit = ""

    def on_focus_in(self, state: PunctuationState, has_surrounding_text: bool) -> None:
        if has_surrounding_text:
            state.may_rebuild_state_from_surrounding_text = True

    def on_reset(self, state: PunctuationState, has_surrounding_text: bool) -> None:
        """Clear the state, keeping a backup to rebuild it later."""
        state.last_is_eng_or_digit = ""
        state.not_converted_backup = state.not_converted
        state.not_converted = 0
        state.last_punc_stack_backup = dict(state.last_punc_stack)
        state.last_punc_stack.clear()
        if has_surrounding_text:
            state.may_rebuild_state_from_surrounding_text = True

    def on_surrounding_text_updated(
        self, state: PunctuationState, text: Optional[str], cursor: int
    ) -> None:
        """Rebuild state from the text before the cursor.

        ``text`` is ``None`` when no valid surrounding text is available;
        ``cursor`` is a character offset.
        """
        if state.may_rebuild_state_from_surrounding_text:
            state.may_rebuild_state_from_surrounding_text = False
        else:
            state.not_converted_backup = 0
            state.last_punc_stack_backup.clear()
            return
        if text is None or not _is_valid(text):
            return
        if cursor <= 0 or cursor > len(text):
            return
        last = text[cursor - 1]
        if _is_ascii_alnum(last):
            state.last_is_eng_or_digit = last
        if ord(last) == state.not_converted_backup and state.not_converted == 0:
            state.not_converted = state.not_converted_backup
        state.not_converted_backup = 0
        if state.last_punc_stack_backup and not state.last_punc_stack:
            for ch in text[:cursor]:
                for key, value in state.last_punc_stack_backup.items():
                    if value == ch:
                        state.last_punc_stack.setdefault(key, value)
                        break
        state.last_punc_stack_backup.clear()