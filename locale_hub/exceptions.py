# locale_hub/exceptions.py
"""
本模块定义了 Locale-Hub 项目中所有自定义的、语义化的异常类型。

解析请求语言时的输入问题（非法 locale、未知策略）在内部被吸收并降级为
"未找到"，不会向上传播；只有调用方显式要求的失败（例如 ``raise_on_missing``）
才会以这里定义的异常形式出现。
"""

from collections.abc import Iterable, Sequence
from typing import Any, Optional


class LocaleHubError(Exception):
    """
    所有 Locale-Hub 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    pass


class ConfigurationError(LocaleHubError):
    """表示在加载、解析或验证配置时发生的错误。"""

    pass


class InvalidLocaleError(LocaleHubError, ValueError):
    """
    表示一个格式错误或不受支持的 locale。

    `locale` 只保存经过白名单清洗后的文本，错误消息中不会出现原始输入。
    """

    def __init__(
        self,
        locale: Optional[str],
        reason: str,
        supported: Iterable[str] = (),
    ) -> None:
        self.locale = str(locale) if locale is not None else None
        self.reason = reason
        self.supported = tuple(str(entry) for entry in supported)
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = f"Invalid locale '{self.locale}' ({self.reason})."
        if self.supported:
            message += f" Supported locales: {', '.join(self.supported)}"
        return message


class InvalidFieldError(LocaleHubError, ValueError):
    """表示一个不在可翻译字段白名单中的字段名。"""

    def __init__(self, field: Any) -> None:
        self.field = field
        super().__init__(f"Field is not translatable: {str(field)[:64]!r}")


class MissingTranslationError(LocaleHubError, LookupError):
    """
    在回退链上的所有 locale 都没有可用翻译、且调用方要求抛出异常时引发。
    携带请求的 locale 与完整的尝试链，便于上层排查。
    """

    def __init__(
        self,
        locale: str,
        chain: Sequence[str],
        field: Optional[str] = None,
        subject: Any = None,
    ) -> None:
        self.locale = str(locale)
        self.chain = [str(entry) for entry in chain]
        self.field = field
        self.subject = subject
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        parts = [f"Missing translation for locale {self.locale!r}."]
        if self.field:
            parts.append(f"Field: {self.field}.")
        if self.subject is not None:
            parts.append(f"Subject: {self.subject!r}.")
        parts.append(f"Tried: {', '.join(self.chain) or '(nothing)'}")
        return " ".join(parts)


class MissingRequiredTranslationsError(LocaleHubError, ValueError):
    """必填 locale 的翻译缺失时引发，一次性列出所有缺失项。"""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = [str(entry) for entry in missing]
        super().__init__(
            f"Missing required translations for: {', '.join(self.missing)}"
        )
