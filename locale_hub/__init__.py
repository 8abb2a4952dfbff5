# locale_hub/__init__.py
"""Locale-Hub: 可嵌入的翻译解析引擎。

负责确定一个请求应当使用的 locale，并沿回退链从记录的多语言数据中
解析出具体的翻译值，结果缓存在带 TTL 的内存缓存中。
"""

__version__ = "1.0.0"

from .cache import CacheConfig, TranslationCache, cache_key
from .config import LocaleHubConfig
from .context import MemoryStore, RequestContext
from .exceptions import (
    InvalidLocaleError,
    LocaleHubError,
    MissingRequiredTranslationsError,
    MissingTranslationError,
)
from .fallback import (
    TranslationOptions,
    build_fallback_chain,
    get_translation,
    merge_translations,
    validate_required,
)
from .locale import PRIMARY_LOCALE, Locale, to_locale
from .resolver import LocaleResolver, ResolverConfig, Strategy, parse_accept_language
from .service import TranslationService
from .validator import LocaleValidator

__all__ = [
    "__version__",
    "PRIMARY_LOCALE",
    "CacheConfig",
    "InvalidLocaleError",
    "Locale",
    "LocaleHubConfig",
    "LocaleHubError",
    "LocaleResolver",
    "LocaleValidator",
    "MemoryStore",
    "MissingRequiredTranslationsError",
    "MissingTranslationError",
    "RequestContext",
    "ResolverConfig",
    "Strategy",
    "TranslationCache",
    "TranslationOptions",
    "TranslationService",
    "build_fallback_chain",
    "cache_key",
    "get_translation",
    "merge_translations",
    "parse_accept_language",
    "to_locale",
    "validate_required",
]
