"""异常处理模块：定义统一的业务异常、目录树错误类型与响应格式。"""

from typing import Any, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.packages.drive.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_INTERNAL_SERVER_ERROR,
    HTTP_STATUS_NOT_FOUND,
)
from app.packages.drive.core.logger import logger


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


class EntryError(AppException):
    """目录树操作失败的基类。

    每个子类声明稳定的 ``kind`` 与 HTTP 状态码；``kind`` 会放入响应的
    ``data.kind`` 中，前端据此渲染提示，而不依赖 ``msg`` 文案。
    """

    kind = "entry_error"
    status_code_default = HTTP_STATUS_BAD_REQUEST
    default_msg = "文件操作失败"

    def __init__(self, msg: Optional[str] = None, *, entry_id: Optional[str] = None, **extra: Any) -> None:
        payload: dict[str, Any] = {"kind": self.kind}
        if entry_id is not None:
            payload["entry_id"] = entry_id
        payload.update(extra)
        super().__init__(msg or self.default_msg, self.status_code_default, payload)
        self.entry_id = entry_id


class NotFound(EntryError):
    # 不存在与不属于当前用户合并为同一种错误，避免跨用户泄露存在性
    kind = "not_found"
    status_code_default = HTTP_STATUS_NOT_FOUND
    default_msg = "文件或文件夹不存在"


class Forbidden(EntryError):
    kind = "forbidden"
    status_code_default = HTTP_STATUS_FORBIDDEN
    default_msg = "无权操作该文件或文件夹"


class InvalidParent(EntryError):
    kind = "invalid_parent"
    status_code_default = HTTP_STATUS_BAD_REQUEST
    default_msg = "目标父目录无效"


class CycleDetected(EntryError):
    kind = "cycle_detected"
    status_code_default = HTTP_STATUS_CONFLICT
    default_msg = "不能将目录移动到其自身或子目录中"


class InvalidName(EntryError):
    kind = "invalid_name"
    status_code_default = HTTP_STATUS_BAD_REQUEST
    default_msg = "名称无效"


class InvalidRestore(EntryError):
    kind = "invalid_restore"
    status_code_default = HTTP_STATUS_CONFLICT
    default_msg = "上级目录仍在回收站中，请先恢复上级目录"


class NameConflict(EntryError):
    kind = "name_conflict"
    status_code_default = HTTP_STATUS_CONFLICT
    default_msg = "同一目录下已存在同名文件或文件夹"


class InvalidPurge(EntryError):
    kind = "invalid_purge"
    status_code_default = HTTP_STATUS_CONFLICT
    default_msg = "只能彻底删除回收站中的文件或文件夹"


class InvalidEntry(EntryError):
    kind = "invalid_entry"
    status_code_default = HTTP_STATUS_BAD_REQUEST
    default_msg = "文件属性无效"


class InternalError(EntryError):
    kind = "internal"
    status_code_default = HTTP_STATUS_INTERNAL_SERVER_ERROR
    default_msg = "服务器内部错误"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    payload = {"msg": exc.detail, "data": getattr(exc, "data", None), "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：记录未捕获异常并转换为标准的 500 响应结构。"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    payload = {
        "msg": InternalError.default_msg,
        "data": {"kind": InternalError.kind},
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
