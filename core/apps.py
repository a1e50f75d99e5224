import logging
import os

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'

    def ready(self):
        # Only the autoreloader child runs jobs, otherwise they fire twice
        if settings.SCHEDULER_ENABLED and os.environ.get('RUN_MAIN', None) == 'true':
            from . import scheduler
            try:
                logger.info("Starting scheduler from apps.py")
                scheduler.start()
            except Exception:
                logger.exception("Scheduler failed to start")
