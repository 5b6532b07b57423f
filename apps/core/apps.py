# apps/core/apps.py

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app: models, storage gateway and hierarchy service"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core - Board hierarchy'

    def ready(self):
        """
        Log which event topic calendar tasks will be published on
        """
        import logging
        from django.conf import settings

        logger = logging.getLogger(__name__)
        if settings.BOARDFLOW_EVENTS_ENABLED:
            logger.info(f"📨 Calendar events enabled on topic '{settings.BOARDFLOW_EVENTS_TOPIC}'")
