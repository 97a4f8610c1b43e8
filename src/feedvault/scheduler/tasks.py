"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from feedvault.config import Settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def cleanup_task(settings: Settings) -> dict[str, bool]:
    """清理任务：删除过期消息、清空回收站."""
    from feedvault.core.messages import MessageStore
    from feedvault.models.database import async_session_maker

    results: dict[str, bool] = {}

    if settings.purge_older_than_days <= 0 and not settings.purge_bin_on_cleanup:
        logger.debug("未启用清理，跳过")
        return results

    async with async_session_maker()() as session:
        store = MessageStore(session)

        if settings.purge_older_than_days > 0:
            results["old_messages"] = await store.purge_old_messages(
                settings.purge_older_than_days
            )

        if settings.purge_bin_on_cleanup:
            results["recycle_bin"] = await store.purge_recycle_bin()

    failed = [name for name, ok in results.items() if not ok]
    if failed:
        logger.warning(f"清理任务部分失败: {failed}")
    else:
        logger.info(f"清理任务完成: {list(results)}")
    return results


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        cleanup_task,
        "interval",
        minutes=settings.cleanup_interval_minutes,
        args=[settings],
        id="cleanup_task",
        name="消息清理",
        replace_existing=True,
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，清理间隔: {settings.cleanup_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
