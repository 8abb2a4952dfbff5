# locale_hub/config.py

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from locale_hub.cache import CacheConfig, TranslationCache
from locale_hub.fallback import TranslationOptions
from locale_hub.locale import DEFAULT_SUPPORTED_LOCALES, to_locale
from locale_hub.resolver import COOKIE_MAX_AGE, LocaleResolver, ResolverConfig
from locale_hub.service import TranslationService
from locale_hub.utils import validate_lang_codes
from locale_hub.validator import LocaleValidator


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class LocaleHubConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    supported_locales: list[str] = Field(
        default_factory=lambda: [str(locale) for locale in DEFAULT_SUPPORTED_LOCALES]
    )
    fallback_locale: str = "en"
    strategies: list[str] = Field(default_factory=lambda: ["auto"])
    required_locales: list[str] = Field(default_factory=list)

    param_key: str = "locale"
    session_key: str = "locale"
    cookie_key: str = "locale"
    cookie_max_age: int = Field(default=COOKIE_MAX_AGE, gt=0)

    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("supported_locales", "required_locales")
    @classmethod
    def validate_locale_list(cls, v: list[str]) -> list[str]:
        validate_lang_codes(v)
        normalized: list[str] = []
        for code in v:
            locale = to_locale(code)
            if locale is None:
                raise ValueError(f"提供的语言代码 '{code}' 无法规范化。")
            if str(locale) not in normalized:
                normalized.append(str(locale))
        return normalized

    @field_validator("fallback_locale")
    @classmethod
    def validate_fallback_locale(cls, v: str) -> str:
        validate_lang_codes([v])
        locale = to_locale(v)
        if locale is None:
            raise ValueError(f"提供的语言代码 '{v}' 无法规范化。")
        return str(locale)

    def build_validator(self) -> LocaleValidator:
        return LocaleValidator(self.supported_locales)

    def build_resolver(self, validator: Optional[LocaleValidator] = None) -> LocaleResolver:
        return LocaleResolver(
            validator or self.build_validator(),
            param_key=self.param_key,
            session_key=self.session_key,
            cookie_key=self.cookie_key,
            cookie_max_age=self.cookie_max_age,
        )

    def build_resolver_config(self, custom: Any = None) -> ResolverConfig:
        return ResolverConfig(
            strategies=tuple(self.strategies),
            fallback=self.fallback_locale,
            supported=tuple(self.supported_locales),
            custom=custom,
        )

    def build_cache(self) -> TranslationCache:
        return TranslationCache(self.cache)

    def build_service(self) -> TranslationService:
        return TranslationService(
            validator=self.build_validator(),
            cache=self.build_cache(),
            options=TranslationOptions(fallback=self.fallback_locale),
        )
