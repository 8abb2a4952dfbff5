# locale_hub/cache.py
"""本模块提供带 TTL 的内存缓存，用于记忆回退解析的结果，减少重复查找。"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any, NamedTuple, Optional, TypeVar

from cachetools import TLRUCache
from pydantic import BaseModel, Field

from locale_hub import audit
from locale_hub.locale import Locale, sanitize, to_locale

T = TypeVar("T")

_MISSING = object()

CacheKey = tuple[Hashable, str, str]


class CacheConfig(BaseModel):
    """缓存配置模型。"""

    maxsize: int = Field(default=10_000, gt=0)
    ttl: float = Field(default=3600, ge=0, description="默认存活时间（秒），0 表示不缓存")
    enabled: bool = True


class CacheStats(BaseModel):
    size: int
    hits: int
    misses: int
    # 失效、清空、过期清理与容量淘汰移除的条目总数
    evictions: int
    hit_rate: float


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(_key: Any, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class _CountingTLRUCache(TLRUCache):
    """在容量淘汰和过期清理时回调 ``on_evict``，以便统计所有被移除的条目。"""

    def __init__(self, *args: Any, on_evict: Callable[[int], None], **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._on_evict = on_evict

    def popitem(self) -> tuple[Any, Any]:
        item = super().popitem()
        self._on_evict(1)
        return item

    def expire(self, time: Any = None) -> Any:
        # 写入时也会先清理过期条目
        before = len(self)
        result = super().expire(time)
        removed = before - len(self)
        if removed:
            self._on_evict(removed)
        return result


def cache_key(subject: Hashable, field: str, locale: Any) -> CacheKey:
    """
    为 (记录标识, 字段, locale) 生成缓存键。

    locale 会被规范化，因此 ``"FR"`` 与 ``Locale("fr")`` 得到同一个键；
    无法解析的 locale 以清洗后的文本参与键的构造。
    """
    normalized: Optional[Locale] = to_locale(locale)
    locale_part = str(normalized) if normalized is not None else sanitize(str(locale))
    return (subject, field, locale_part)


class TranslationCache:
    """
    一个线程安全的翻译结果缓存。

    每个条目都有自己的 TTL，到期后无论读取多频繁都不会再返回。
    计算函数在锁外执行：同一个键在并发未命中时可能被重复计算，
    这是允许的，缓存不提供 single-flight 保证。写入底层翻译数据后，
    调用方必须先 :meth:`invalidate` 再读取，缓存不会自动感知写入。
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        *,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CacheConfig()
        self._timer = timer
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._initialize_cache()

    def _initialize_cache(self) -> None:
        self._cache: TLRUCache[Any, _Entry] = _CountingTLRUCache(
            maxsize=self.config.maxsize,
            ttu=_time_to_use,
            timer=self._timer,
            on_evict=self._record_evictions,
        )

    def _record_evictions(self, count: int) -> None:
        self._evictions += count

    def _effective_ttl(self, ttl: Optional[float]) -> float:
        if not self.config.enabled:
            return 0
        return self.config.ttl if ttl is None else ttl

    def get(self, key: Hashable, default: Any = None) -> Any:
        """读取未过期的缓存值，未命中时返回 ``default``。"""
        with self._lock:
            entry = self._cache.get(key, _MISSING)
            if entry is _MISSING:
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def put(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        effective = self._effective_ttl(ttl)
        if effective <= 0:
            return
        with self._lock:
            self._cache[key] = _Entry(value, effective)

    def get_or_compute(
        self,
        key: Hashable,
        compute_fn: Callable[[], T],
        ttl: Optional[float] = None,
    ) -> T:
        """
        命中时直接返回缓存值；未命中或已过期时调用 ``compute_fn`` 并存入结果。

        ``ttl`` 为 None 时使用配置中的默认值；为 0 时本次调用不缓存。
        ``compute_fn`` 抛出的异常会原样传播，且不会写入缓存。
        """
        effective = self._effective_ttl(ttl)
        if effective <= 0:
            return compute_fn()

        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        value = compute_fn()
        with self._lock:
            self._cache[key] = _Entry(value, effective)
        return value

    def invalidate(self, subject: Hashable, field: Optional[str] = None) -> int:
        """删除某个记录（可选限定字段）的全部条目，返回删除数量。"""
        with self._lock:
            stale = [
                key
                for key in list(self._cache.keys())
                if isinstance(key, tuple)
                and len(key) == 3
                and key[0] == subject
                and (field is None or key[1] == field)
            ]
            for key in stale:
                self._cache.pop(key, None)
            self._evictions += len(stale)
        audit.log_cache_invalidation(subject, field, len(stale))
        return len(stale)

    def purge_expired(self) -> int:
        """主动清理已过期的条目，返回清理数量。"""
        with self._lock:
            before = len(self._cache)
            self._cache.expire()
            removed = before - len(self._cache)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._evictions += len(self._cache)
            self._initialize_cache()

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                size=len(self._cache),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                hit_rate=round(self._hits / total * 100, 2) if total else 0.0,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
