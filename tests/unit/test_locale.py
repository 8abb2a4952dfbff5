# tests/unit/test_locale.py
"""针对 `locale_hub.locale` 模块的单元测试。"""

import pytest

from locale_hub.exceptions import InvalidLocaleError
from locale_hub.locale import PRIMARY_LOCALE, Locale, base_language, sanitize, to_locale


def test_locale_is_interned_and_case_normalized() -> None:
    """相同的标签总是得到同一个对象，且规范形式为小写。"""
    assert to_locale("FR") is to_locale("fr")
    assert Locale("fr-CA") == "fr-ca"
    assert Locale(Locale("es")) is Locale("es")


def test_locale_behaves_like_its_raw_string() -> None:
    """Locale 与等值的原始字符串哈希一致，可以直接查询字典。"""
    translations = {"es": "Hola"}
    assert translations[Locale("es")] == "Hola"
    assert hash(Locale("es")) == hash("es")
    assert repr(Locale("es")) == "Locale('es')"


def test_language_and_region_subtags() -> None:
    locale = Locale("fr-ca")
    assert locale.language == "fr"
    assert isinstance(locale.language, Locale)
    assert locale.region == "ca"
    assert locale.has_region
    assert Locale("fr").region is None


def test_variants_share_the_base_language() -> None:
    assert Locale("fr-ca").is_variant_of("fr")
    assert Locale("fr").is_variant_of("FR-be")
    assert not Locale("fr").is_variant_of("en")
    assert not Locale("fr").is_variant_of(None)


@pytest.mark.parametrize("tag", ["fr ca", "-en", "en-", "", "en--us"])
def test_direct_construction_rejects_malformed_tags(tag: str) -> None:
    with pytest.raises(InvalidLocaleError) as excinfo:
        Locale(tag)
    assert excinfo.value.reason == "invalid_format"


def test_direct_construction_rejects_non_strings() -> None:
    with pytest.raises(TypeError):
        Locale(42)  # type: ignore[arg-type]


def test_sanitize_keeps_only_whitelisted_characters() -> None:
    assert sanitize("en-US,en;q=0.8") == "en-US,en;q=0.8"
    assert sanitize("<b>en</b>\r\n") == "benb"
    assert sanitize("fr_CA") == "frCA"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("EN", "en"),
        (" de ", "de"),
        ("e<n>", "en"),
        ("fr-CA", "fr-ca"),
    ],
)
def test_to_locale_sanitizes_then_parses(raw: str, expected: str) -> None:
    assert to_locale(raw) == expected


@pytest.mark.parametrize("raw", [None, 12, ["en"], "", "!!!", "en;q=1", "a" * 65])
def test_to_locale_returns_none_instead_of_raising(raw: object) -> None:
    assert to_locale(raw) is None


def test_base_language_and_primary_locale() -> None:
    assert base_language("pt-BR") == "pt"
    assert base_language(None) is None
    assert PRIMARY_LOCALE == "en"
