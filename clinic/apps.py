from django.apps import AppConfig


class ClinicConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'clinic'
    verbose_name = 'Clinic scheduling & billing'

    def ready(self):
        from clinic import receivers  # noqa: F401
