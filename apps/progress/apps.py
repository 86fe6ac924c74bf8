from django.apps import AppConfig


class ProgressConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.progress'
    label = 'progress'

    def ready(self):
        # تسجيل مستقبِلات الإشارات (منح النقاط عند التسميع والحضور)
        from . import signals  # noqa: F401
