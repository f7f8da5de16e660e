"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量，便于在本地/生产之间切换。
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """核心配置项。

    - ``database_url``：默认使用本地 SQLite 文件。
    - ``session_ttl_days``：登录会话有效期（天）。
    - ``bcrypt_rounds``：密码哈希的 cost 参数。
    """

    database_url: str = Field(
        default="sqlite:///./data/app.db", description="SQLAlchemy 数据库 URL"
    )
    session_ttl_days: int = Field(default=7, description="会话有效天数")
    session_cookie_name: str = Field(
        default="session_token", description="登录后写入的 Cookie 名称"
    )
    bcrypt_rounds: int = Field(default=10, ge=4, le=31, description="bcrypt cost")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO", description="日志级别")
    default_kv_namespace: str = Field(
        default="global", description="KV 快照未指定命名空间时的默认值"
    )

    model_config = {
        "env_prefix": "CLASSROOM_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()
