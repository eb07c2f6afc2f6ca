from django.apps import AppConfig


class ReservationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "reservations"
    verbose_name = "Venue reservations"

    def ready(self) -> None:
        from reservations import signals  # noqa: F401
        from reservations.wiring import build_services

        self.services = build_services()
