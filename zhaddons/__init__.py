"""Chinese input helpers: script conversion, full-width text, punctuation, pinyin and stroke lookup, cloud pinyin and .scel reading."""

__version__ = "0.1.0"