from apscheduler.schedulers.background import BackgroundScheduler
from app.services.ttl_cache import TTLCache
from app.utils.log import app_logger

SWEEP_JOB_ID = "cache_sweep"


def build_scheduler() -> BackgroundScheduler:
    # in-memory jobstore: the sweep job targets a live cache object and is
    # re-registered on every startup
    return BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})


def start_scheduler(scheduler: BackgroundScheduler):
    if not scheduler.running:
        scheduler.start()
        app_logger.info("scheduler: started")


def shutdown_scheduler(scheduler: BackgroundScheduler):
    if scheduler.running:
        scheduler.shutdown(wait=True)
        app_logger.info("scheduler: shutdown")


def run_sweep(cache: TTLCache) -> int:
    """
    drop expired windows from `cache`.
    best effort: a failing sweep is logged and the next tick tries again.
    """
    try:
        removed = cache.sweep()
    except Exception as e:
        app_logger.error("scheduler: cache sweep failed", exc_type=type(e).__name__, error=str(e))
        return 0
    if removed:
        app_logger.info("scheduler: cache sweep", removed=removed, remaining=len(cache))
    return removed


def add_sweep_job(scheduler: BackgroundScheduler, cache: TTLCache, interval_seconds: float):
    """
    register the periodic sweep for `cache`.
    if the job already exists do nothing.
    """
    if scheduler.get_job(SWEEP_JOB_ID):
        app_logger.info(f"scheduler: job already exists {SWEEP_JOB_ID}")
        return

    scheduler.add_job(
        run_sweep, 'interval', seconds=interval_seconds, args=[cache], id=SWEEP_JOB_ID, replace_existing=False
    )
    app_logger.info(f"scheduler: added sweep job {SWEEP_JOB_ID} every {interval_seconds}s")
