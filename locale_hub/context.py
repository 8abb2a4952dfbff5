# locale_hub/context.py
"""
定义 locale 解析器与请求处理层之间的边界。

解析器只通过这里的只读访问器读取请求；会话、Cookie 和用户偏好的写入
都通过最小的能力接口完成，具体实现由宿主框架提供。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

PRINCIPAL_LOCALE_FIELDS = ("locale", "preferred_locale")


class KeyValueStore(Protocol):
    """会话或 Cookie 这类键值存储的能力接口。"""

    def read(self, key: str) -> Any:
        """读取一个值，不存在时返回 None。"""
        ...

    def write(self, key: str, value: Any, **options: Any) -> None:
        """写入一个值；``options`` 例如 Cookie 的 ``max_age``。"""
        ...


class PrincipalStore(Protocol):
    """读取与更新已认证用户 locale 偏好的能力接口。"""

    def read_preference(self, principal: Any) -> Any:
        ...

    def update_preference(self, principal: Any, locale: str) -> bool:
        """更新偏好；无法识别的 principal 类型返回 False。"""
        ...


class MemoryStore:
    """基于字典的 KeyValueStore 实现，同时记录每次写入的选项。"""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})
        self.write_options: dict[str, dict[str, Any]] = {}

    def read(self, key: str) -> Any:
        return self._data.get(key)

    def write(self, key: str, value: Any, **options: Any) -> None:
        self._data[key] = value
        self.write_options[key] = options

    def __contains__(self, key: object) -> bool:
        return key in self._data


def read_principal_locale(principal: Any) -> Any:
    """按 ``locale``、``preferred_locale`` 的顺序读取 principal 的语言偏好。"""
    if principal is None:
        return None
    for name in PRINCIPAL_LOCALE_FIELDS:
        if isinstance(principal, Mapping):
            value = principal.get(name)
        else:
            value = getattr(principal, name, None)
        if value is not None:
            return value
    return None


@dataclass
class RequestContext:
    """
    一个入站请求的纯值抽象。

    宿主框架负责从自己的请求对象中填充这些字段。``path`` 是原始路径，
    ``headers`` 的键不区分大小写。
    """

    params: Mapping[str, Any] = field(default_factory=dict)
    query_params: Mapping[str, Any] = field(default_factory=dict)
    path: str = "/"
    host: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    session: Optional[KeyValueStore] = None
    cookies: Optional[KeyValueStore] = None
    principal: Any = None
    principals: Optional[PrincipalStore] = None
    client_ip: Optional[str] = None

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None
