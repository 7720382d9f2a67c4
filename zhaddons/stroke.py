"""Stroke-sequence lookup of Chinese characters with fuzzy matching."""

from __future__ import annotations

import heapq
import itertools
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

_STROKE_DIGITS = "12345"
_SPACE = " \n\t\r\v\f"
_SPLIT = re.compile("[" + re.escape(_SPACE) + "]")
_STROKE_NAMES = {"1": "一", "2": "丨", "3": "丿", "4": "㇏", "5": "𠃍"}

_DELETION_WEIGHT = 5
_INSERTION_WEIGHT = 5
_SUBSTITUTION_WEIGHT = 5
_TRANSPOSITION_WEIGHT = 5
_MAX_WEIGHT = 10


class _Node:
    __slots__ = ("children", "terminal")

    def __init__(self) -> None:
        self.children: Dict[str, "_Node"] = {}
        self.terminal = False

    def insert(self, key: str) -> None:
        node = self
        for ch in key:
            node = node.children.setdefault(ch, _Node())
        node.terminal = True

    def find(self, key: str) -> Optional["_Node"]:
        node: Optional[_Node] = self
        for ch in key:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    def walk(self, prefix: str = "") -> Iterator[str]:
        """Yield every key below this node, in code point order."""
        if self.terminal:
            yield prefix
        for ch in sorted(self.children):
            yield from self.children[ch].walk(prefix + ch)


def _is_valid(text: str) -> bool:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class Stroke:
    """Dictionary of characters keyed by stroke sequences of digits 1-5."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._root = _Node()
        self._reverse: Dict[str, str] = {}
        self._loaded = False
        self._load_result = False

    def load(self) -> bool:
        """Load the dictionary file once; return whether it is usable."""
        if self._loaded:
            return self._load_result
        self._loaded = True
        if self._path is None:
            return False
        try:
            data = self._path.read_bytes()
        except OSError:
            return False
        lines = []
        for raw in data.split(b"\n"):
            try:
                lines.append(raw.decode("utf-8"))
            except UnicodeDecodeError:
                continue
        self._add_lines(lines)
        self._load_result = True
        return True

    def load_lines(self, lines: Iterable[str]) -> None:
        """Fill the dictionary from ``strokes<space>character`` lines."""
        self._add_lines(lines)
        self._loaded = True
        self._load_result = True

    def _add_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            if not _is_valid(line):
                continue
            line = line.strip(_SPACE)
            if not line or line.startswith("#"):
                continue
            tokens = _SPLIT.split(line)
            if len(tokens) != 2:
                continue
            strokes, hanzi = tokens
            if len(hanzi) != 1 or any(c not in _STROKE_DIGITS for c in strokes):
                continue
            self._root.insert(f"{strokes}|{hanzi}")
            self._reverse[hanzi] = strokes

    def lookup(self, strokes: str, limit: int) -> List[Tuple[str, str]]:
        """Find characters for a stroke sequence, allowing one typing error.

        Returns ``(character, strokes)`` pairs, best matches first. Results
        are kept unique by stroke sequence. A ``limit`` of zero returns only
        an unambiguous prefix match; a negative limit means no limit.
        """
        result: List[Tuple[str, str]] = []
        seen = set()

        def add(hanzi: str, sequence: str) -> None:
            if sequence not in seen:
                seen.add(sequence)
                result.append((hanzi, sequence))

        start = self._root.find(strokes)
        if start is not None:
            matches = list(itertools.islice(start.walk(strokes), 2))
            if len(matches) == 1:
                key = matches[0]
                idx = key.rfind("|")
                if idx >= 0:
                    add(key[idx + 1:], key[:idx])
        if limit >= 0 and len(result) >= limit:
            return result

        counter = itertools.count()
        queue: list = []

        def push(weight: int, node: _Node, prefix: str, remain: str) -> None:
            if weight < _MAX_WEIGHT:
                heapq.heappush(queue, (weight, next(counter), node, prefix, remain))

        push(0, self._root, "", strokes)
        while queue:
            weight, _, node, prefix, remain = heapq.heappop(queue)
            if not remain:
                bar = node.children.get("|")
                if bar is not None:
                    full = False
                    for hanzi in bar.walk():
                        add(hanzi, prefix)
                        if limit > 0 and len(result) >= limit:
                            full = True
                            break
                    if full:
                        break

            if remain:
                push(weight + _DELETION_WEIGHT, node, prefix, remain[1:])

            for digit in _STROKE_DIGITS:
                child = node.children.get(digit)
                if child is None:
                    continue
                if remain and remain[0] == digit:
                    push(weight, child, prefix + digit, remain[1:])
                else:
                    push(weight + _INSERTION_WEIGHT, child, prefix + digit, remain)
                    if remain:
                        push(
                            weight + _SUBSTITUTION_WEIGHT,
                            child,
                            prefix + digit,
                            remain[1:],
                        )
                if len(remain) >= 2 and remain[1] == digit:
                    swapped = child.children.get(remain[0])
                    if swapped is not None:
                        push(
                            weight + _TRANSPOSITION_WEIGHT,
                            swapped,
                            prefix + digit + remain[0],
                            remain[2:],
                        )
        return result

    def reverse_lookup(self, hanzi: str) -> str:
        """Stroke sequence of a character, or an empty string."""
        return self._reverse.get(hanzi, "")

    def pretty_string(self, strokes: str) -> str:
        """Render a digit stroke sequence with stroke glyphs; "" if invalid."""
        try:
            return "".join(_STROKE_NAMES[c] for c in strokes)
        except KeyError:
            return ""