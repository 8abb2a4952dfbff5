# locale_hub/resolver.py
"""
Locale 解析器：按有序的策略列表确定一个请求的"当前" locale。

每个内置策略都会把取到的原始候选值交给 LocaleValidator 校验；非法候选
等同于"未找到"。解析位于请求的热路径上，因此对任意输入都是全函数：
未知策略、读取上下文时的异常都降级为 None，而不是让请求失败。
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

import structlog

from locale_hub import audit
from locale_hub.context import RequestContext, read_principal_locale
from locale_hub.exceptions import InvalidLocaleError
from locale_hub.locale import PRIMARY_LOCALE, Locale, to_locale
from locale_hub.validator import LocaleValidator

logger = structlog.get_logger(__name__)

COOKIE_MAX_AGE = 365 * 24 * 60 * 60
RE_QUALITY_PREFIX = re.compile(r"^[+-]?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")


class Strategy(str, Enum):
    """内置的 locale 解析策略。"""

    PARAM = "param"
    PATH = "path"
    SUBDOMAIN = "subdomain"
    USER = "user"
    SESSION = "session"
    COOKIE = "cookie"
    HEADER = "header"
    AUTO = "auto"
    CUSTOM = "custom"


class PersistTarget(str, Enum):
    SESSION = "session"
    COOKIE = "cookie"
    USER = "user"


# auto 策略的固定优先级
AUTO_ORDER: tuple[Strategy, ...] = (
    Strategy.PARAM,
    Strategy.PATH,
    Strategy.SUBDOMAIN,
    Strategy.USER,
    Strategy.SESSION,
    Strategy.COOKIE,
    Strategy.HEADER,
)

# 这些策略在候选值非法时会记录一条审计警告
AUDITED_STRATEGIES = frozenset(
    {Strategy.PARAM, Strategy.PATH, Strategy.SUBDOMAIN, Strategy.SESSION, Strategy.COOKIE}
)

CustomResolver = Callable[[Any], Any]
StrategySpec = Union[Strategy, str, CustomResolver]
SupportedSpec = Union[None, Iterable[Any], Callable[[Any], bool]]


@dataclass(frozen=True)
class ResolverConfig:
    """resolve_with_config 使用的解析配置。"""

    strategies: Sequence[StrategySpec] = (Strategy.AUTO,)
    fallback: str = "en"
    supported: SupportedSpec = None
    custom: Optional[CustomResolver] = None


def coerce_strategy(value: Any) -> Optional[Strategy]:
    """把策略名转换为 Strategy，未知的名称返回 None。"""
    if isinstance(value, Strategy):
        return value
    if isinstance(value, str):
        try:
            return Strategy(value.strip().lower())
        except ValueError:
            return None
    return None


def _parse_quality(raw: str) -> float:
    match = RE_QUALITY_PREFIX.match(raw.strip())
    if match is None:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def parse_accept_language(header: Any) -> list[tuple[Locale, float]]:
    """
    解析 Accept-Language 风格的加权语言列表。

    每个标签只保留主子标签（``en-US`` -> ``en``）；没有 ``q`` 参数时质量为
    1.0，``q`` 无法解析时为 0.0；格式非法的标签被丢弃。结果按质量降序
    稳定排序，质量相同的标签保持原有相对顺序。

    >>> parse_accept_language("es;q=0.5,en;q=0.9")
    [(Locale('en'), 0.9), (Locale('es'), 0.5)]
    """
    if isinstance(header, (list, tuple)):
        header = header[0] if header else None
    if not isinstance(header, str):
        return []

    parsed: list[tuple[Locale, float]] = []
    for entry in header.split(","):
        lang, *params = entry.split(";")
        primary = lang.strip().split("-")[0]
        locale = to_locale(primary)
        if locale is None:
            continue

        quality = 1.0
        for param in params:
            name, sep, value = param.strip().partition("=")
            if sep and name.strip().lower() == "q":
                quality = _parse_quality(value)
                break
        parsed.append((locale, quality))

    return sorted(parsed, key=lambda pair: pair[1], reverse=True)


class LocaleResolver:
    """依次尝试解析策略，确定请求的 locale。"""

    def __init__(
        self,
        validator: Optional[LocaleValidator] = None,
        *,
        param_key: str = "locale",
        session_key: str = "locale",
        cookie_key: str = "locale",
        cookie_max_age: int = COOKIE_MAX_AGE,
    ) -> None:
        self.validator = validator or LocaleValidator()
        self.param_key = param_key
        self.session_key = session_key
        self.cookie_key = cookie_key
        self.cookie_max_age = cookie_max_age
        self._readers: dict[Strategy, Callable[[RequestContext], Any]] = {
            Strategy.PARAM: self._read_param,
            Strategy.PATH: self._read_path,
            Strategy.SUBDOMAIN: self._read_subdomain,
            Strategy.USER: self._read_user,
            Strategy.SESSION: self._read_session,
            Strategy.COOKIE: self._read_cookie,
            Strategy.HEADER: self._read_header,
        }

    def resolve(
        self, context: RequestContext, strategy: StrategySpec = Strategy.AUTO
    ) -> Optional[Locale]:
        """
        使用单个策略解析 locale，找不到时返回 None。

        可调用对象会被直接调用，其返回值不再校验，由调用方负责。
        """
        if callable(strategy):
            try:
                return strategy(context)
            except Exception as e:
                audit.log_resolution_error("custom", e)
                return None

        kind = coerce_strategy(strategy)
        if kind is None:
            logger.debug(
                "未知的 locale 解析策略，已忽略", strategy=audit.sanitize_for_log(strategy)
            )
            return None

        if kind is Strategy.AUTO:
            for step in AUTO_ORDER:
                locale = self.resolve(context, step)
                if locale is not None:
                    return locale
            return None

        reader = self._readers.get(kind)
        if reader is None:
            # custom 策略只有在配置了函数时才有意义，见 resolve_with_config
            return None

        try:
            candidate = reader(context)
        except Exception as e:
            audit.log_resolution_error(kind.value, e)
            return None

        if kind is Strategy.HEADER or candidate is None or candidate == "":
            return candidate or None
        return self._validate_candidate(candidate, kind, context)

    def resolve_with_config(self, context: RequestContext, config: ResolverConfig) -> Locale:
        """
        按配置中的策略顺序解析，返回第一个结果；若它不在 ``config.supported``
        之内，或者所有策略都未找到，则返回 ``config.fallback``。
        """
        resolved: Any = None
        for strategy in config.strategies or (Strategy.AUTO,):
            if config.custom is not None and coerce_strategy(strategy) is Strategy.CUSTOM:
                resolved = self.resolve(context, config.custom)
            else:
                resolved = self.resolve(context, strategy)
            if resolved is not None:
                break

        if resolved is not None and self._is_supported(resolved, config.supported):
            locale = to_locale(resolved)
            if locale is not None:
                return locale

        return to_locale(config.fallback) or PRIMARY_LOCALE

    def persist(
        self,
        context: RequestContext,
        locale: Any,
        targets: Union[PersistTarget, str, Iterable[Union[PersistTarget, str]]],
    ) -> list[PersistTarget]:
        """
        把 locale 写入会话、Cookie 或用户偏好，返回实际写入的目标。

        用户偏好的更新由 ``context.principals`` 完成；没有 principal、没有
        存储或存储无法识别 principal 时为空操作。未知目标被忽略。
        """
        normalized = to_locale(locale)
        if normalized is None:
            audit.log_locale_rejected(
                locale, "invalid_format", source="persist", client_ip=context.client_ip
            )
            return []

        if isinstance(targets, str):
            targets = [targets]

        value = str(normalized)
        written: list[PersistTarget] = []
        for target in targets:
            try:
                kind = PersistTarget(target)
            except ValueError:
                logger.debug(
                    "未知的 locale 持久化目标，已忽略", target=audit.sanitize_for_log(target)
                )
                continue

            if kind is PersistTarget.SESSION and context.session is not None:
                context.session.write(self.session_key, value)
                written.append(kind)
            elif kind is PersistTarget.COOKIE and context.cookies is not None:
                context.cookies.write(self.cookie_key, value, max_age=self.cookie_max_age)
                written.append(kind)
            elif kind is PersistTarget.USER:
                if context.principal is None or context.principals is None:
                    continue
                if context.principals.update_preference(context.principal, value):
                    written.append(kind)
        return written

    # --- 私有方法 ---

    def _validate_candidate(
        self, candidate: Any, kind: Strategy, context: RequestContext
    ) -> Optional[Locale]:
        try:
            return self.validator.validate(candidate)
        except InvalidLocaleError as e:
            if kind in AUDITED_STRATEGIES:
                audit.log_locale_rejected(
                    candidate, e.reason, source=kind.value, client_ip=context.client_ip
                )
            return None

    def _is_supported(self, locale: Any, supported: SupportedSpec) -> bool:
        if supported is None:
            return True
        if callable(supported):
            try:
                return bool(supported(locale))
            except Exception as e:
                audit.log_resolution_error("supported", e)
                return False
        if isinstance(supported, str):
            supported = [supported]
        target = to_locale(locale)
        if target is None:
            return False
        return any(to_locale(entry) == target for entry in supported)

    def _read_param(self, context: RequestContext) -> Any:
        value = context.params.get(self.param_key)
        if value is None:
            value = context.query_params.get(self.param_key)
        return value

    def _read_path(self, context: RequestContext) -> Any:
        segments = context.path_segments
        return segments[0] if segments else None

    def _read_subdomain(self, context: RequestContext) -> Any:
        if not context.host:
            return None
        return context.host.split(".")[0]

    def _read_user(self, context: RequestContext) -> Any:
        if context.principals is not None and context.principal is not None:
            value = context.principals.read_preference(context.principal)
            if value is not None:
                return value
        return read_principal_locale(context.principal)

    def _read_session(self, context: RequestContext) -> Any:
        if context.session is None:
            return None
        return context.session.read(self.session_key)

    def _read_cookie(self, context: RequestContext) -> Any:
        if context.cookies is None:
            return None
        return context.cookies.read(self.cookie_key)

    def _read_header(self, context: RequestContext) -> Optional[Locale]:
        for tag, _quality in parse_accept_language(context.header("accept-language")):
            locale = self.validator.try_validate(tag)
            if locale is not None:
                return locale
        return None
