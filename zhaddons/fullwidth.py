"""Half-width to full-width character conversion."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

# Full-width forms for the printable ASCII range 32..126.
_TABLE = (
    "　！＂＃￥％＆＇（）＊＋，－．／"
    "０１２３４５６７８９：；＜＝＞？＠"
    "ＡＢＣＤＥＦＧＨＩＪＫＬＭＮＯＰＱＲＳＴＵＶＷＸＹＺ"
    "［＼］＾＿｀"
    "ａｂｃｄｅｆｇｈｉｊｋｌｍｎｏｐｑｒｓｔｕｖｗｘｙｚ"
    "｛｜｝～"
)
_FIRST = 32


def fullwidth_char(code: int) -> Optional[str]:
    """Return the full-width form of a key code, or ``None`` if it has none."""
    if _FIRST <= code < _FIRST + len(_TABLE):
        return _TABLE[code - _FIRST]
    return None


def to_fullwidth(text: str) -> str:
    """Convert printable ASCII (except space) in ``text`` to full width."""
    return "".join(
        _TABLE[ord(ch) - _FIRST] if _FIRST < ord(ch) < _FIRST + len(_TABLE) else ch
        for ch in text
    )


class Fullwidth:
    """Toggleable full-width input state.

    Hotkeys are ``(key, modifiers)`` pairs, where ``key`` is a key code and
    ``modifiers`` a modifier bit mask (0 for none).
    """

    def __init__(self, hotkeys: Iterable[Tuple[int, int]] = ()) -> None:
        self._hotkeys = frozenset((key, modifiers) for key, modifiers in hotkeys)
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def short_text(self) -> str:
        return "Full width Character" if self._enabled else "Half width Character"

    def icon(self) -> str:
        return "fcitx-fullwidth-active" if self._enabled else "fcitx-fullwidth-inactive"

    def handle_key(
        self, key: int, modifiers: int = 0, is_release: bool = False
    ) -> Tuple[bool, Optional[str]]:
        """Process a key press.

        Returns ``(accepted, commit)``: whether the key was consumed and the
        text to commit for it, if any. A hotkey toggles the state and commits
        nothing.
        """
        if is_release:
            return False, None
        if (key, modifiers) in self._hotkeys:
            self.set_enabled(not self._enabled)
            return True, None
        if not self._enabled or modifiers:
            return False, None
        converted = fullwidth_char(key)
        if converted is None:
            return False, None
        return True, converted

    def filter_commit(self, text: str) -> str:
        """Convert committed text when full-width mode is on."""
        if not self._enabled:
            return text
        return to_fullwidth(text)