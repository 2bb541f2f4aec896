import pytest

from i18nify.keys import generate_key, join_syllables, romanize


@pytest.mark.parametrize(
    "count, width",
    [
        (1, None),
        (3, None),
        (4, 4),
        (7, 4),
        (8, 2),
        (15, 2),
        (16, 1),
        (20, 1),
    ],
)
def test_join_syllables_tiers(count, width):
    syllables = ["zhuang"] * count
    expected = "zhuang" * count if width is None else "zhuang"[:width] * count
    assert join_syllables(syllables) == expected


def test_join_syllables_keeps_short_syllables_whole():
    assert join_syllables(["zhong", "guo", "ren", "min"]) == "zhonguorenmin"


def test_join_syllables_empty():
    assert join_syllables([]) == ""


def test_generate_key_empty_string():
    assert generate_key("") == ""
    assert romanize("") == []


def test_generate_key_short_text_uses_full_syllables():
    assert generate_key("你好") == "nihao"
    assert generate_key("前缀") == "qianzhui"
    assert generate_key("后缀") == "houzhui"


def test_generate_key_four_syllables():
    assert generate_key("中华人民") == "zhonhuarenmin"


def test_generate_key_eight_syllables():
    assert generate_key("一二三四五六七八") == "yiersasiwuliqiba"


def test_generate_key_sixteen_syllables():
    assert generate_key("一二三四五六七八九十一二三四五六") == "yesswlqbjsyesswl"


def test_generate_key_is_deterministic():
    text = "欢迎使用本系统，请先登录"
    assert generate_key(text) == generate_key(text)


def test_romanize_drops_tones():
    assert romanize("你好") == ["ni", "hao"]


def test_romanize_keeps_ascii_words_and_drops_punctuation():
    assert romanize("Hello 你好!") == ["Hello", "ni", "hao"]
    assert generate_key("Hello 你好!") == "Hellonihao"


def test_generate_key_is_ascii():
    key = generate_key("绿色的，“引号”与标点。")
    assert key.isascii()
    assert key.isalnum()
