"""定时任务."""

from feedvault.scheduler.tasks import cleanup_task, create_scheduler, shutdown_scheduler

__all__ = ["cleanup_task", "create_scheduler", "shutdown_scheduler"]
