from django.apps import AppConfig


class BangsConfig(AppConfig):
    name = "bangs"
    verbose_name = "Bangs"
