# locale_hub/service.py
"""
把校验器、回退引擎和缓存组合在一起的高层入口。

宿主框架读取可翻译字段时调用 :meth:`TranslationService.translate`；写入
翻译后调用 :meth:`TranslationService.apply_update` 或
:meth:`TranslationService.put_translation`，它们返回新的映射（持久化由调用方
完成）并先行失效缓存。
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, Optional

import structlog

from locale_hub.cache import TranslationCache, cache_key
from locale_hub.exceptions import MissingTranslationError
from locale_hub.fallback import (
    TranslationOptions,
    get_translation,
    merge_translations,
    normalize_translations,
)
from locale_hub.locale import PRIMARY_LOCALE, to_locale
from locale_hub.validator import LocaleValidator

logger = structlog.get_logger(__name__)


class TranslationService:
    def __init__(
        self,
        validator: Optional[LocaleValidator] = None,
        cache: Optional[TranslationCache] = None,
        options: Optional[TranslationOptions] = None,
    ) -> None:
        self.validator = validator or LocaleValidator()
        self.cache = cache or TranslationCache()
        self.options = options or TranslationOptions()

    def translate(
        self,
        subject: Hashable,
        field: str,
        translations: Any,
        locale: Any,
        ttl: Optional[float] = None,
        **overrides: Any,
    ) -> Any:
        """
        读取一个可翻译字段，优先使用缓存。

        传入 ``overrides``（例如 ``default`` 或 ``raise_on_missing``）时结果
        取决于调用参数，本次调用绕过缓存。
        """
        requested = to_locale(locale) or PRIMARY_LOCALE

        def compute() -> Any:
            try:
                return get_translation(translations, requested, self.options, **overrides)
            except MissingTranslationError as e:
                # 补充字段与记录信息后重新抛出
                raise MissingTranslationError(e.locale, e.chain, field=field, subject=subject) from e

        if overrides:
            return compute()
        return self.cache.get_or_compute(cache_key(subject, field, requested), compute, ttl)

    def apply_update(
        self,
        subject: Hashable,
        field: str,
        current: Optional[Mapping[Any, Any]],
        update: Optional[Mapping[Any, Any]],
    ) -> dict[Any, Any]:
        """
        用一次（可能只包含部分 locale 的）更新覆盖现有翻译，并失效缓存。

        更新中值为 None 或空字符串的 locale 不会清空已有翻译。
        """
        merged = merge_translations(update, current)
        self.cache.invalidate(subject, field)
        logger.debug("已合并翻译更新", field=field, locales=len(merged))
        return merged

    def put_translation(
        self,
        subject: Hashable,
        field: str,
        current: Optional[Mapping[Any, Any]],
        locale: Any,
        value: Optional[str],
    ) -> dict[Any, Any]:
        """设置单个 locale 的翻译；``value`` 为 None 时删除该 locale。"""
        target = self.validator.validate(locale)
        updated = dict(normalize_translations(current))
        if value is None:
            updated.pop(target, None)
        else:
            updated[target] = value
        self.cache.invalidate(subject, field)
        return updated
