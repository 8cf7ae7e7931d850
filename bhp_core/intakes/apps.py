from django.apps import AppConfig


class IntakesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bhp_core.intakes"
