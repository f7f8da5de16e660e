"""统一的 API 错误类型与 FastAPI 异常处理器。"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """带稳定错误码的业务异常，响应体为 ``{"error": code}``。"""

    def __init__(
        self,
        status_code: int,
        code: str,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(code)
        self.status_code = status_code
        self.code = code
        self.details = details


def unauthorized() -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED")


def not_found(entity: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, f"{entity.upper()}_NOT_FOUND")


def conflict(code: str) -> ApiError:
    return ApiError(status.HTTP_409_CONFLICT, code)


def bad_request(code: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, code)


# SQLite INTEGER 为 64 位有符号整数
MAX_ID = 2**63 - 1


def to_id(raw: Any) -> Optional[int]:
    """仅接受 ASCII 数字组成、落在 1..MAX_ID 内的值，否则返回 ``None``。"""

    text = str(raw).strip() if raw is not None else ""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if value <= 0 or value > MAX_ID:
        return None
    return value


def parse_id(raw: Any, entity: str) -> int:
    """把路径/查询参数解析为正整数 ID，失败时抛出 ``INVALID_<ENTITY>_ID``。"""

    value = to_id(raw)
    if value is None:
        raise bad_request(f"INVALID_{entity.upper()}_ID")
    return value


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors: List[Dict[str, str]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(_request: Request, exc: ApiError) -> JSONResponse:
        body: Dict[str, Any] = {"error": exc.code}
        if exc.details is not None:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "INVALID_REQUEST", "details": _field_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND and request.url.path.startswith("/api/"):
            return JSONResponse(status_code=404, content={"error": "NOT_FOUND"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("未处理异常: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "INTERNAL_ERROR"},
        )
