# locale_hub/validator.py
"""
Locale 校验器：清洗、解析来自不可信来源的 locale，并确认它属于受支持集合。

这里只做精确的成员检查，不做任何变体匹配；``fr-ca`` 在只配置了 ``fr`` 时
会被拒绝。变体匹配属于回退引擎（见 :mod:`locale_hub.fallback`）。
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from locale_hub.exceptions import InvalidFieldError, InvalidLocaleError
from locale_hub.locale import (
    DEFAULT_SUPPORTED_LOCALES,
    MAX_TAG_LENGTH,
    RE_LOCALE_TAG,
    Locale,
    sanitize,
    to_locale,
)


class LocaleValidator:
    """根据一个有序的受支持 locale 集合校验输入。"""

    def __init__(self, supported_locales: Optional[Iterable[Any]] = None) -> None:
        source = DEFAULT_SUPPORTED_LOCALES if supported_locales is None else supported_locales
        ordered: list[Locale] = []
        for entry in source:
            locale = to_locale(entry)
            if locale is None:
                raise InvalidLocaleError(
                    sanitize(str(entry))[:MAX_TAG_LENGTH], "invalid_format"
                )
            if locale not in ordered:
                ordered.append(locale)
        self._supported: tuple[Locale, ...] = tuple(ordered)
        self._supported_set = frozenset(ordered)

    @property
    def supported_locales(self) -> tuple[Locale, ...]:
        return self._supported

    def validate(self, raw: Any) -> Locale:
        """
        校验并返回规范化的 Locale。

        Raises:
            InvalidLocaleError: 类型错误（invalid_type）、格式错误（invalid_format）
                或不受支持（not_supported）。异常中只包含清洗后的文本。
        """
        if isinstance(raw, Locale):
            candidate = str(raw)
        elif isinstance(raw, str):
            candidate = sanitize(raw).lower()
        else:
            raise InvalidLocaleError(None, "invalid_type")

        if not candidate or len(candidate) > MAX_TAG_LENGTH or not RE_LOCALE_TAG.match(candidate):
            raise InvalidLocaleError(candidate[:MAX_TAG_LENGTH], "invalid_format")

        locale = Locale(candidate)
        if locale not in self._supported_set:
            raise InvalidLocaleError(locale, "not_supported", self._supported)
        return locale

    def try_validate(self, raw: Any) -> Optional[Locale]:
        try:
            return self.validate(raw)
        except InvalidLocaleError:
            return None

    def is_supported(self, raw: Any) -> bool:
        return self.try_validate(raw) is not None

    def validate_field(self, field: Any, allowed_fields: Iterable[str]) -> str:
        """校验字段名属于可翻译字段白名单。"""
        if not isinstance(field, str):
            raise InvalidFieldError(field)
        name = field.strip()
        if name not in set(allowed_fields):
            raise InvalidFieldError(sanitize(name))
        return name

    def __repr__(self) -> str:
        return f"LocaleValidator(supported={list(map(str, self._supported))})"
