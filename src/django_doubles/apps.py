from django.apps import AppConfig


class DjangoDoublesAppConfig(AppConfig):
    """Configuration for the django_doubles app."""

    name = "django_doubles"
    verbose_name = "Django Doubles"

    def ready(self) -> None:
        """Register the system checks and load the configuration from settings."""
        from django_doubles import checks  # noqa: F401

        from .configuration import reset_configuration

        reset_configuration()
