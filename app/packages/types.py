"""业务包元数据定义：主应用只通过这里声明的接口与业务包交互。"""

from __future__ import annotations

from dataclasses import dataclass
from logging import Logger
from typing import Callable

from fastapi import APIRouter


@dataclass(frozen=True)
class AppPackage:
    """描述一个业务包暴露给主应用的必要接口。"""

    name: str
    api_router: APIRouter
    get_settings: Callable[[], object]
    setup_logging: Callable[[], None]
    logger: Logger
    # 启动阶段建表
    init_db: Callable[[], None]
    create_response: Callable[..., dict]
    # 异常处理器：业务异常 / 未捕获异常
    http_exception_handler: Callable[..., object]
    generic_exception_handler: Callable[..., object]
