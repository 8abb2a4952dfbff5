# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

import logging
from collections.abc import Generator
from typing import Any

import pytest
import structlog
from pytest_mock import MockerFixture
from rich.console import Console

from locale_hub.context import MemoryStore, RequestContext
from locale_hub.resolver import LocaleResolver
from locale_hub.validator import LocaleValidator


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """保存并恢复根记录器与 structlog 的全局配置。"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("locale_hub").setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.fixture
def validator() -> LocaleValidator:
    return LocaleValidator(["en", "es", "fr", "de"])


@pytest.fixture
def resolver(validator: LocaleValidator) -> LocaleResolver:
    return LocaleResolver(validator)


@pytest.fixture
def make_context() -> Any:
    """构造 RequestContext 的工厂，会话与 Cookie 默认是空的 MemoryStore。"""

    def factory(**kwargs: Any) -> RequestContext:
        kwargs.setdefault("session", MemoryStore())
        kwargs.setdefault("cookies", MemoryStore())
        return RequestContext(**kwargs)

    return factory
