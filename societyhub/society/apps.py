from django.apps import AppConfig


class SocietyConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'societyhub.society'
