# core/scheduler.py

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from django.conf import settings

from automation.main import start_scraping
from locates.services.lifecycle import sweep_expired_timers

logger = logging.getLogger(__name__)


def run_timer_sweep():
    count = sweep_expired_timers()
    logger.info("Scheduled timer sweep finished: %d expired", count)
    return count


def start():
    scheduler = BackgroundScheduler(timezone=settings.TIME_ZONE)

    scheduler.add_job(start_scraping, 'interval', minutes=settings.SCRAPE_INTERVAL_MINUTES,
                      id='scrape_locates', max_instances=1, coalesce=True)
    scheduler.add_job(run_timer_sweep, 'interval', minutes=settings.TIMER_SWEEP_MINUTES,
                      id='sweep_expired_timers', max_instances=1, coalesce=True)

    scheduler.start()
    return scheduler
