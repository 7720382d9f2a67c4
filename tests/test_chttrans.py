import pytest

from zhaddons.chttrans import (
    Chttrans,
    ChttransBackend,
    ChttransEngine,
    ChttransIMType,
    NativeBackend,
    TextSegment,
    input_method_entry_type,
)


@pytest.fixture
def table(tmp_path):
    path = tmp_path / "gbks2t.tab"
    path.write_text("简簡\n体體\n干乾\n干幹\n\nx\n", encoding="utf-8")
    return path


class _Shorten(ChttransBackend):
    def _load_once(self):
        return True

    def convert_simp_to_trad(self, text):
        return text[:-1]

    def convert_trad_to_simp(self, text):
        return text[:-1]


@pytest.mark.parametrize(
    "code, expected",
    [
        ("zh_CN", ChttransIMType.SIMP),
        ("zh_HK", ChttransIMType.TRAD),
        ("zh_TW", ChttransIMType.TRAD),
        ("en", ChttransIMType.OTHER),
        ("", ChttransIMType.OTHER),
    ],
)
def test_input_method_entry_type(code, expected):
    assert input_method_entry_type(code) is expected


def test_native_backend_from_file(table):
    backend = NativeBackend(table)
    assert backend.loaded() is False
    assert backend.load() is True
    assert backend.loaded() is True
    assert backend.convert_simp_to_trad("简体abc") == "簡體abc"
    assert backend.convert_trad_to_simp("簡體abc") == "简体abc"


def test_native_backend_first_mapping_wins(table):
    backend = NativeBackend(table)
    backend.load()
    assert backend.convert_simp_to_trad("干") == "乾"
    assert backend.convert_trad_to_simp("乾幹") == "干干"


def test_native_backend_skips_short_lines():
    backend = NativeBackend()
    backend.load_lines(["x\n", "", "简簡\n"])
    assert backend.convert_simp_to_trad("x简") == "x簡"
    assert backend.convert_trad_to_simp("\n") == "\n"


def test_native_backend_missing_file(tmp_path):
    backend = NativeBackend(tmp_path / "missing.tab")
    assert backend.load() is False
    assert backend.loaded() is False


def test_round_trip(table):
    backend = NativeBackend(table)
    backend.load()
    text = "简体"
    assert backend.convert_trad_to_simp(backend.convert_simp_to_trad(text)) == text


def test_types_and_toggle(table):
    chttrans = Chttrans({ChttransEngine.NATIVE: NativeBackend(table)})
    assert chttrans.convert_type("pinyin", "zh_CN") is ChttransIMType.OTHER
    assert chttrans.current_type("pinyin", "zh_CN") is ChttransIMType.SIMP
    assert chttrans.toggle("pinyin", "zh_CN") is ChttransIMType.TRAD
    assert chttrans.enabled_im() == ["pinyin"]
    assert chttrans.convert_type("pinyin", "zh_CN") is ChttransIMType.TRAD
    assert chttrans.toggle("pinyin", "zh_CN") is ChttransIMType.SIMP
    assert chttrans.enabled_im() == []


def test_toggle_ignores_other_languages(table):
    chttrans = Chttrans({ChttransEngine.NATIVE: NativeBackend(table)})
    assert chttrans.toggle("keyboard-us", "en") is ChttransIMType.OTHER
    assert chttrans.enabled_im() == []
    assert chttrans.input_method_type(None, "zh_CN") is ChttransIMType.OTHER


def test_enabled_im_sorted(table):
    chttrans = Chttrans({}, enabled_im=["b", "a"])
    assert chttrans.enabled_im() == ["a", "b"]


def test_trad_im_converts_to_simp(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)}, enabled_im=["cangjie"]
    )
    assert chttrans.convert_type("cangjie", "zh_TW") is ChttransIMType.SIMP
    assert chttrans.filter_commit("cangjie", "zh_TW", "簡體") == "简体"


def test_filter_commit(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)}, enabled_im=["pinyin"]
    )
    assert chttrans.filter_commit("pinyin", "zh_CN", "简体") == "簡體"
    assert chttrans.filter_commit("other", "zh_CN", "简体") == "简体"


def test_engine_falls_back_to_native(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)},
        engine=ChttransEngine.OPENCC,
        enabled_im=["pinyin"],
    )
    assert chttrans.convert(ChttransIMType.TRAD, "简") == "簡"


def test_convert_without_backend():
    chttrans = Chttrans({}, enabled_im=["pinyin"])
    assert chttrans.convert(ChttransIMType.TRAD, "简") == "简"


def test_convert_with_unloadable_backend(tmp_path):
    chttrans = Chttrans({ChttransEngine.NATIVE: NativeBackend(tmp_path / "none")})
    assert chttrans.convert(ChttransIMType.TRAD, "简") == "简"


def test_filter_output_single_segment(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)}, enabled_im=["pinyin"]
    )
    segments, cursor = chttrans.filter_output(
        "pinyin", "zh_CN", [TextSegment("简体", 3)], 1
    )
    assert segments == [TextSegment("簡體", 3)]
    assert cursor == 1


def test_filter_output_multi_segment(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)}, enabled_im=["pinyin"]
    )
    segments, cursor = chttrans.filter_output(
        "pinyin", "zh_CN", [TextSegment("简", 1), TextSegment("体a", 2)], 0
    )
    assert segments == [TextSegment("簡", 1), TextSegment("體a", 2)]
    assert cursor == 0


def test_filter_output_shorter_result_clamps():
    chttrans = Chttrans({ChttransEngine.NATIVE: _Shorten()}, enabled_im=["pinyin"])
    segments, cursor = chttrans.filter_output(
        "pinyin", "zh_CN", [TextSegment("ab", 1), TextSegment("cd", 2)], 4
    )
    assert segments == [TextSegment("ab", 1), TextSegment("c", 2)]
    assert cursor == 3


def test_filter_output_disabled_unchanged(table):
    chttrans = Chttrans({ChttransEngine.NATIVE: NativeBackend(table)})
    original = [TextSegment("简", 1)]
    segments, cursor = chttrans.filter_output("pinyin", "zh_CN", original, -1)
    assert segments == original
    assert cursor == -1


def test_filter_output_empty(table):
    chttrans = Chttrans(
        {ChttransEngine.NATIVE: NativeBackend(table)}, enabled_im=["pinyin"]
    )
    assert chttrans.filter_output("pinyin", "zh_CN", [], 2) == ([], 2)