"""FeedVault 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedvault import __version__
from feedvault.api import accounts, counts, messages
from feedvault.config import get_settings
from feedvault.models.database import close_db, init_db
from feedvault.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    logger.info("正在启动定时任务...")
    create_scheduler(app_settings)

    logger.info("FeedVault 启动完成！")
    yield

    logger.info("正在关闭...")
    await shutdown_scheduler()
    await close_db()
    logger.info("FeedVault 已关闭")


app = FastAPI(
    title="FeedVault",
    description="RSS 消息存储与同步合并引擎",
    version=__version__,
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(messages.router)
app.include_router(counts.router)
app.include_router(accounts.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedVault",
        "version": __version__,
        "description": "RSS 消息存储与同步合并引擎",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedvault.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
