# locale_hub/fallback.py
"""
回退引擎：在翻译映射上构建回退链，并解析出第一个可用的翻译值。

"存在"的定义贯穿本模块：键存在，且值是非空字符串。``None``、缺失的键
和空字符串都视为缺失；仅含空白的字符串视为存在（不做 strip）。
合并时则不会把缺失的情况折叠，见 :func:`merge_translations`。

本模块的所有函数都是纯函数，从不修改传入的映射。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field

from locale_hub.audit import sanitize_for_log
from locale_hub.exceptions import (
    InvalidLocaleError,
    MissingRequiredTranslationsError,
    MissingTranslationError,
)
from locale_hub.locale import PRIMARY_LOCALE, Locale, sanitize, to_locale


class TranslationOptions(BaseModel):
    """单次 get_translation 调用的选项。"""

    # 不限定类型：default 原样返回，无法解析的 fallback 在回退链中被跳过
    fallback: Any = Field(default=None, description="优先于主 locale 尝试的回退 locale")
    default: Any = Field(default=None, description="整条回退链都缺失时返回的值")
    raise_on_missing: bool = False


class CompletenessReport(BaseModel):
    """一组 locale 上的翻译完整度报告。"""

    total: int
    complete: int
    missing: list[str]
    coverage: float


def is_present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def normalize_translations(translations: Any) -> dict[Locale, Any]:
    """
    把翻译映射的键统一为 Locale。

    同一 locale 同时以 Locale 键和原始字符串键出现时，Locale 键优先；
    无法解析为 locale 的键会被忽略。结果保持原映射的顺序。
    """
    if not isinstance(translations, Mapping):
        return {}

    normalized: dict[Locale, Any] = {}
    from_locale_keys: set[Locale] = set()
    for key, value in translations.items():
        locale = to_locale(key)
        if locale is None:
            continue
        if isinstance(key, Locale):
            normalized[locale] = value
            from_locale_keys.add(locale)
        elif locale not in normalized:
            normalized[locale] = value
        elif locale not in from_locale_keys and not is_present(normalized[locale]):
            # 两个原始字符串键规范化后相同：取第一个存在的值
            normalized[locale] = value
    return normalized


def build_fallback_chain(
    locale: Any,
    fallback: Any = None,
    available: Iterable[Any] = (),
) -> list[Locale]:
    """
    构建去重的有序回退链：``[locale, 基础语言, fallback, 主 locale] + available``。

    例如 ``build_fallback_chain("fr-CA", "en", ["en", "fr"])`` 返回
    ``[fr-ca, fr, en]``。链的构建与数据是否存在无关，无法解析的 ``locale``
    降级为主 locale，无法解析的 ``fallback``/``available`` 项被跳过。
    """
    requested = to_locale(locale) or PRIMARY_LOCALE

    candidates: list[Optional[Locale]] = [requested]
    if requested.has_region:
        candidates.append(requested.language)
    candidates.append(to_locale(fallback))
    candidates.append(PRIMARY_LOCALE)
    candidates.extend(to_locale(entry) for entry in available)

    chain: list[Locale] = []
    seen: set[Locale] = set()
    for candidate in candidates:
        if candidate is None or candidate in seen:
            continue
        seen.add(candidate)
        chain.append(candidate)
    return chain


def get_translation(
    translations: Any,
    requested_locale: Any,
    options: Optional[TranslationOptions] = None,
    **overrides: Any,
) -> Any:
    """
    沿回退链查找第一个存在的翻译值。

    输入问题永远不会导致失败：无法识别的 locale 降级为主 locale，
    非映射的 translations 视为空映射。只有在整条链都缺失、没有提供
    ``default`` 且 ``raise_on_missing`` 为真时才会抛出异常。

    Args:
        translations: 翻译映射，键可以是原始字符串或 Locale。
        requested_locale: 请求的 locale。
        options: 调用选项；``overrides`` 中的关键字会覆盖其中的同名字段。

    Raises:
        MissingTranslationError: 链上没有任何可用值且要求抛出异常。
    """
    if overrides:
        # dict(options) 不复制字段值，default 的对象身份得以保留
        base = dict(options) if options is not None else {}
        options = TranslationOptions.model_validate({**base, **overrides})
    elif options is None:
        options = TranslationOptions()

    normalized = normalize_translations(translations)
    parsed = to_locale(requested_locale)
    requested = parsed or PRIMARY_LOCALE
    chain = build_fallback_chain(requested, options.fallback, normalized.keys())

    for locale in chain:
        value = normalized.get(locale)
        if is_present(value):
            return value

    if options.default is not None:
        return options.default
    if options.raise_on_missing:
        # 无法解析的请求 locale 以清洗后的原始文本报告，回退链仍是降级后的链
        shown = parsed if parsed is not None else sanitize_for_log(requested_locale)
        raise MissingTranslationError(shown, chain)
    return None


def translation_exists(translations: Any, locale: Any) -> bool:
    """只检查给定 locale 本身，不做任何回退。"""
    target = to_locale(locale)
    if target is None:
        return False
    return is_present(normalize_translations(translations).get(target))


def _required_locales(required_locales: Iterable[Any]) -> list[Locale]:
    required: list[Locale] = []
    for entry in required_locales:
        locale = to_locale(entry)
        if locale is None:
            raise InvalidLocaleError(
                sanitize(entry)[:64] if isinstance(entry, str) else None,
                "invalid_format",
            )
        required.append(locale)
    return required


def validate_required(translations: Any, required_locales: Iterable[Any]) -> list[Locale]:
    """
    返回所有缺失的必填 locale，顺序与 ``required_locales`` 一致。

    不会在第一个缺失项处短路，调用方可以一次性展示全部问题。
    空列表表示全部齐备。
    """
    normalized = normalize_translations(translations)
    return [
        locale
        for locale in _required_locales(required_locales)
        if not is_present(normalized.get(locale))
    ]


def ensure_required(translations: Any, required_locales: Iterable[Any]) -> None:
    """validate_required 的抛出版本。"""
    missing = validate_required(translations, required_locales)
    if missing:
        raise MissingRequiredTranslationsError(missing)


def merge_translations(primary: Any, secondary: Any) -> dict[Any, Any]:
    """
    合并两个翻译映射，结果包含两者的全部键。

    同一个键在两边都存在时以 ``primary`` 为准，除非它的值是 ``None``
    或空字符串，此时使用 ``secondary`` 的值。``None`` 的 secondary 等同于
    空映射。这样一次只包含部分 locale 的更新不会把已有翻译清空。
    """
    merged = _merge_view(secondary)
    for key, value in _merge_view(primary).items():
        if key in merged and (value is None or value == ""):
            continue
        merged[key] = value
    return merged


def _merge_view(translations: Any) -> dict[Any, Any]:
    # 合并不能丢数据：无法解析的键按原样保留
    if not isinstance(translations, Mapping):
        return {}
    view: dict[Any, Any] = {}
    for key, value in translations.items():
        locale = to_locale(key)
        if locale is None:
            view[key] = value
        elif isinstance(key, Locale) or locale not in view:
            view[locale] = value
    return view


def completeness_report(translations: Any, locales: Iterable[Any]) -> CompletenessReport:
    """统计给定 locale 上的翻译完整度。"""
    required = _required_locales(locales)
    missing = validate_required(translations, required)
    total = len(required)
    complete = total - len(missing)
    coverage = round(complete / total * 100, 2) if total else 0.0
    return CompletenessReport(
        total=total,
        complete=complete,
        missing=[str(locale) for locale in missing],
        coverage=coverage,
    )
