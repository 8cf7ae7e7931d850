from django.apps import AppConfig


class AsamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bhp_core.asam"
