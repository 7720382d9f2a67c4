# zhaddons

Building blocks for Chinese input methods, in plain Python with no runtime
dependencies.

## Modules

- `zhaddons.chttrans`: Simplified/Traditional conversion. `NativeBackend`
  converts character by character from a two-column table file (each line
  starts with a simplified character followed by its traditional form).
  `Chttrans` keeps the set of input methods with conversion switched on
  (`toggle`, `enabled_im`) and converts committed text (`filter_commit`) and
  formatted text segments with a cursor (`filter_output`).
- `zhaddons.fullwidth`: `to_fullwidth` and `fullwidth_char` map printable
  ASCII to full-width forms. `Fullwidth` is an on/off toggle that handles
  hotkeys given as `(key, modifiers)` pairs in `handle_key` and converts text
  in `filter_commit`.
- `zhaddons.punctuation_profile`: `PunctuationProfile` holds one language's
  mapping from typed characters to punctuation, read from
  `key mapping [alternative]` lines, and writes it back with `dumps` or
  `save`.
- `zhaddons.punctuation`: `Punctuation` converts typed characters with a set
  of profiles. Paired symbols such as quotes alternate between opening and
  closing forms. After an ASCII letter or digit, `.` and `,` stay half width
  unless `cancel_last` asks for the full-width form. `load_profiles` reads
  `punc.mb.<lang>` files from a system and a user directory. Per-input-context
  state lives in `PunctuationState`, updated by `on_commit`, `on_key`,
  `on_focus_in`, `on_reset` and `on_surrounding_text_updated`.
- `zhaddons.pinyinlookup`: `PinyinLookup` reads the binary character-to-pinyin
  table and returns toned readings (`lookup`, `full_lookup`).
- `zhaddons.stroke`: `Stroke` looks up characters by stroke sequences of the
  digits 1–5. The lookup tolerates one deletion, insertion, substitution or
  transposition. It also has `reverse_lookup` and `pretty_string`.
- `zhaddons.pinyinhelper`: `PinyinHelper` combines the two tables above. It
  accepts stroke input as digits or as the letters h, s, p, n, z, and builds
  "duyin" candidates that show the readings of selected or clipboard text.
- `zhaddons.cloudpinyin`: `CloudPinyin` sends pinyin to an online service
  (`CloudPinyinBackend.GOOGLE`, `GOOGLE_CN` or `BAIDU`) through a `Fetcher`
  thread pool. Answers are kept in a cache, and requests stop for five
  minutes after ten failures.
- `zhaddons.lrucache`: `LRUCache`, the fixed-capacity cache used above.
- `zhaddons.scel`: `parse_scel` and `read_scel` read `.scel` dictionary files
  into a `ScelDictionary`. `format_entries` writes the entries as tab-separated
  lines.

## Installing

```
pip install .
```

Install the test tools as well:

```
pip install ".[test]"
```

## Converting a .scel dictionary

```
scel2org dictionary.scel -o words.txt
```

The command writes one line per word, in the form `word<TAB>pin'yin<TAB>0`.
With no `-o`, or with `-o -`, the lines go to standard output. The description
fields go to standard error. Add `-d` to also print the entries of the
deletion table there. A malformed file gives an error message and exit
status 1.

## Examples

```python
from zhaddons.fullwidth import to_fullwidth
from zhaddons.chttrans import Chttrans, ChttransEngine, NativeBackend

print(to_fullwidth("abc 123"))          # ａｂｃ １２３

backend = NativeBackend()
backend.load_lines(["汉漢", "字字"])
chttrans = Chttrans({ChttransEngine.NATIVE: backend})
chttrans.toggle("pinyin", "zh_CN")
print(chttrans.filter_commit("pinyin", "zh_CN", "汉字"))   # 漢字
```

```python
from zhaddons.punctuation import Punctuation, PunctuationState
from zhaddons.punctuation_profile import PunctuationProfile

profile = PunctuationProfile()
profile.load(['" “ ”', ". 。"])
punctuation = Punctuation(profiles={"zh_CN": profile})
state = PunctuationState()

punctuation.push_punctuation("zh_CN", state, '"')   # “
punctuation.push_punctuation("zh_CN", state, '"')   # ”

punctuation.on_commit(state, "abc")
punctuation.push_punctuation("zh_CN", state, ".")   # "" (stays half width)
punctuation.cancel_last("zh_CN", state)             # 。
```

```python
from zhaddons.stroke import Stroke

stroke = Stroke("py_stroke.mb")
if stroke.load():
    print(stroke.pretty_string("12345"))
    print(stroke.lookup("1234", 5))     # [(character, strokes), ...]
```

```python
from zhaddons.cloudpinyin import CloudPinyin, Fetcher

with Fetcher() as fetcher:
    cloud = CloudPinyin(fetcher)
    cloud.request("nihao", lambda pinyin, hanzi: print(pinyin, hanzi))
    if fetcher.wait(10):
        cloud.process_finished()
```

## What the package does not do

- It does not plug into an input method framework. Key events, commits and
  surrounding text must be passed in by the caller. No user interface or
  notifications are shown.
- It does not read or write configuration files. Options are given as
  constructor arguments or as `PunctuationConfig` fields. Only punctuation
  profiles are loaded from and saved to files.
- `ChttransEngine.OPENCC` is named, but no backend for it is included. A
  `Chttrans` asked for it falls back to the native backend when one is
  given.
- No data tables are shipped. The conversion table, pinyin table and stroke
  dictionary must be supplied as files or lines.