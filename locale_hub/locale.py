# locale_hub/locale.py
"""
本模块定义了 Locale 值类型，以及把不可信输入转换为规范 locale 的基础工具。

规范形式为小写、以连字符分隔的子标签序列（例如 ``fr``、``fr-ca``）。
Locale 是 ``str`` 的子类，因此 ``Locale("fr")`` 与原始字符串 ``"fr"`` 的
哈希值和相等性完全一致，可以直接用作或查询翻译映射的键。
"""

from __future__ import annotations

import re
import threading
from typing import Any, Optional

# 白名单之外的字符会被直接剔除。locale 文本来自请求头和请求参数，
# 不能原样流入日志、错误消息或缓存键。
RE_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9,;=.\-]")
# 一个或多个字母数字子标签，以连字符分隔
RE_LOCALE_TAG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

MAX_TAG_LENGTH = 64
# 驻留表容量上限，超出后新建的 Locale 不再驻留
MAX_INTERNED = 4096

_interned: dict[str, "Locale"] = {}
_intern_lock = threading.Lock()


class Locale(str):
    """
    一个经过规范化、驻留的 locale 标识。

    直接构造时会做大小写规范化与格式检查，但不做任何白名单清洗；
    处理不可信输入请使用 :func:`to_locale`。
    """

    __slots__ = ()

    def __new__(cls, tag: str) -> "Locale":
        if isinstance(tag, Locale):
            return tag
        if not isinstance(tag, str):
            raise TypeError(f"Locale tag must be a string, got {type(tag).__name__}")

        canonical = tag.strip().lower()
        cached = _interned.get(canonical)
        if cached is not None:
            return cached

        if len(canonical) > MAX_TAG_LENGTH or not RE_LOCALE_TAG.match(canonical):
            # 延迟导入以避免循环依赖
            from locale_hub.exceptions import InvalidLocaleError

            raise InvalidLocaleError(sanitize(canonical)[:MAX_TAG_LENGTH], "invalid_format")

        instance = super().__new__(cls, canonical)
        with _intern_lock:
            if len(_interned) < MAX_INTERNED:
                instance = _interned.setdefault(canonical, instance)
        return instance

    def __repr__(self) -> str:
        return f"Locale({str(self)!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (Locale, (str(self),))

    @property
    def language(self) -> "Locale":
        """基础语言子标签，即第一个连字符之前的部分。"""
        head, _, _ = self.partition("-")
        return Locale(head)

    @property
    def region(self) -> Optional[str]:
        """第一个连字符之后的部分；没有则为 None。"""
        _, sep, tail = self.partition("-")
        return tail if sep else None

    @property
    def has_region(self) -> bool:
        return "-" in self

    def is_variant_of(self, other: Any) -> bool:
        """当两个 locale 共享同一个基础语言子标签时，它们互为变体。"""
        other_locale = to_locale(other)
        if other_locale is None:
            return False
        return self.language == other_locale.language


PRIMARY_LOCALE = Locale("en")

DEFAULT_SUPPORTED_LOCALES: tuple[Locale, ...] = tuple(
    Locale(tag) for tag in ("en", "es", "fr", "de", "it", "pt", "ja", "zh", "ko", "ar", "ru")
)


def sanitize(raw: str) -> str:
    """剔除白名单 ``[A-Za-z0-9,;=.-]`` 之外的所有字符。"""
    return RE_UNSAFE_CHARS.sub("", raw)


def to_locale(value: Any) -> Optional[Locale]:
    """
    把任意输入规范化为 Locale，失败时返回 None 而不是抛出异常。

    此函数只关心格式，不检查是否属于受支持集合（那是校验器的职责）。
    """
    if isinstance(value, Locale):
        return value
    if not isinstance(value, str):
        return None

    cleaned = sanitize(value).lower()
    if not cleaned or len(cleaned) > MAX_TAG_LENGTH or not RE_LOCALE_TAG.match(cleaned):
        return None
    return Locale(cleaned)


def base_language(value: Any) -> Optional[Locale]:
    """返回 locale 的基础语言，例如 ``fr-ca`` -> ``fr``。"""
    locale = to_locale(value)
    return locale.language if locale is not None else None
