"""应用配置管理."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FEEDVAULT_",
        extra="ignore",
    )

    # 数据库配置
    database_url: str = "sqlite+aiosqlite:///./feedvault.db"

    # 日志配置
    log_level: str = "INFO"

    # 清理任务配置
    cleanup_interval_minutes: int = 60
    purge_older_than_days: int = 0  # 0 表示不清理旧消息
    purge_bin_on_cleanup: bool = False


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
