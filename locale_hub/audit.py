# locale_hub/audit.py
"""
安全审计日志。

所有来自请求的 locale 文本在写入日志前都会经过白名单清洗与截断，
防止日志注入；客户端 IP 等来自传输层的上下文原样记录，便于追溯来源。
"""

from typing import Any, Optional

import structlog

from locale_hub.locale import sanitize

logger = structlog.get_logger("locale_hub.audit")

LOG_VALUE_MAX_LENGTH = 64


def sanitize_for_log(value: Any) -> str:
    """把任意值转换为可以安全写入结构化日志字段的短文本。"""
    if value is None:
        return ""
    if isinstance(value, str):
        cleaned = sanitize(value)
        if len(cleaned) > LOG_VALUE_MAX_LENGTH:
            return cleaned[:LOG_VALUE_MAX_LENGTH] + "...[truncated]"
        return cleaned
    # 非字符串只记录类型，不记录内容
    return f"<{type(value).__name__}>"


def log_locale_rejected(
    value: Any,
    reason: str,
    *,
    source: Optional[str] = None,
    client_ip: Optional[str] = None,
) -> None:
    """记录一次 locale 校验失败。这只是一条警告，从不中断请求。"""
    logger.warning(
        "拒绝了无效的 locale",
        locale=sanitize_for_log(value),
        reason=reason,
        source=source,
        client_ip=client_ip,
    )


def log_resolution_error(strategy: str, error: BaseException) -> None:
    """记录策略执行期间出现的意外异常，解析流程会继续降级处理。"""
    logger.warning(
        "locale 解析策略执行失败，已降级为未找到",
        strategy=strategy,
        error_type=type(error).__name__,
    )


def log_cache_invalidation(subject: Any, field: Optional[str], removed: int) -> None:
    logger.debug(
        "已失效翻译缓存条目",
        subject=repr(subject)[:LOG_VALUE_MAX_LENGTH],
        field=field,
        removed=removed,
    )
