"""FastAPI 入口，负责日志、跨域、异常处理与数据库表初始化。"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classroom import models  # noqa: F401  注册全部表
from classroom.api import router as api_router
from classroom.config import get_settings
from classroom.db import Base, engine
from classroom.errors import register_exception_handlers

logger = logging.getLogger(__name__)


def init_db() -> None:
    """确保表存在。"""

    Base.metadata.create_all(bind=engine)
    logger.info("数据库表已就绪: %s", engine.url.render_as_string(hide_password=True))


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """应用工厂，便于测试与拓展路由。"""

    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Classroom API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    def on_startup() -> None:
        init_db()

    @app.get("/api/health", tags=["系统"])
    def health() -> dict:
        return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()
