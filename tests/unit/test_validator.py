# tests/unit/test_validator.py
"""
针对 `locale_hub.validator` 模块的单元测试。

验证白名单清洗、格式检查以及受支持集合的精确成员检查。
"""

import pytest

from locale_hub.exceptions import InvalidFieldError, InvalidLocaleError
from locale_hub.locale import DEFAULT_SUPPORTED_LOCALES, Locale
from locale_hub.validator import LocaleValidator


def test_default_supported_locales() -> None:
    assert LocaleValidator().supported_locales == DEFAULT_SUPPORTED_LOCALES


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("en", "en"),
        ("EN", "en"),
        (" fr ", "fr"),
        ("e<n>", "en"),
        ("de\n", "de"),
        (Locale("es"), "es"),
    ],
)
def test_validate_accepts_supported_locales(
    validator: LocaleValidator, raw: object, expected: str
) -> None:
    result = validator.validate(raw)
    assert result == expected
    assert isinstance(result, Locale)


@pytest.mark.parametrize("raw", [42, None, ["en"], 3.5])
def test_validate_rejects_wrong_types(validator: LocaleValidator, raw: object) -> None:
    with pytest.raises(InvalidLocaleError) as excinfo:
        validator.validate(raw)
    assert excinfo.value.reason == "invalid_type"


@pytest.mark.parametrize("raw", ["", "!!!", "en;q=0.9", "en.us", "-en", "en,fr"])
def test_validate_rejects_malformed_tags(validator: LocaleValidator, raw: str) -> None:
    with pytest.raises(InvalidLocaleError) as excinfo:
        validator.validate(raw)
    assert excinfo.value.reason == "invalid_format"


def test_validate_never_echoes_unsanitized_text(validator: LocaleValidator) -> None:
    """被剔除的字符不会出现在异常的任何位置。"""
    with pytest.raises(InvalidLocaleError) as excinfo:
        validator.validate("<script>alert(1)</script>")
    error = excinfo.value
    assert error.reason == "not_supported"
    assert error.locale == "scriptalert1script"
    assert "<" not in str(error)
    assert "(" not in error.locale


def test_regional_variant_is_not_matched_by_validation(validator: LocaleValidator) -> None:
    """只配置了 fr 时，fr-CA 不会通过校验；变体匹配属于回退引擎。"""
    with pytest.raises(InvalidLocaleError) as excinfo:
        validator.validate("fr-CA")
    assert excinfo.value.reason == "not_supported"
    assert "fr" in excinfo.value.supported


def test_regional_locale_validates_when_configured() -> None:
    validator = LocaleValidator(["en", "fr-CA"])
    assert validator.validate("FR-ca") == "fr-ca"


def test_underscore_separator_is_stripped_not_translated(validator: LocaleValidator) -> None:
    assert validator.try_validate("fr_CA") is None


def test_try_validate_and_is_supported(validator: LocaleValidator) -> None:
    assert validator.try_validate("ES") == "es"
    assert validator.try_validate("ja") is None
    assert validator.is_supported("de")
    assert not validator.is_supported(None)


def test_supported_locales_are_normalized_and_deduplicated() -> None:
    validator = LocaleValidator(["fr", "EN", "fr"])
    assert validator.supported_locales == ("fr", "en")


def test_malformed_supported_locale_is_a_configuration_error() -> None:
    with pytest.raises(InvalidLocaleError):
        LocaleValidator(["en", "!!"])


def test_validate_field(validator: LocaleValidator) -> None:
    assert validator.validate_field(" name ", ["name", "description"]) == "name"
    with pytest.raises(InvalidFieldError):
        validator.validate_field("password", ["name"])
    with pytest.raises(InvalidFieldError):
        validator.validate_field(123, ["name"])
