"""arq worker for the store's scheduled jobs.

  arq services.store_service.worker.WorkerSettings
"""

from arq import cron
from libs.common.arq_config import get_redis_settings
from libs.common.config import get_settings
from libs.common.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def task_sweep_subscriptions(ctx: dict) -> dict:
    from services.store_service.tasks import run_subscription_sweep

    logger.info("Running: sweep_due_subscriptions")
    result = await run_subscription_sweep()
    return {
        "processed": len(result.processed),
        "skipped": len(result.skipped),
        "failed": len(result.failed),
    }


async def startup(ctx: dict) -> None:
    configure_logging()


class WorkerSettings:
    redis_settings = get_redis_settings()

    on_startup = startup

    functions = [task_sweep_subscriptions]

    cron_jobs = [
        cron(
            task_sweep_subscriptions,
            hour={get_settings().SUBSCRIPTION_SWEEP_HOUR},
            minute={0},
            unique=True,
        ),
    ]
