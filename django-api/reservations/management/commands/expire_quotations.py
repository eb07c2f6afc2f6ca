from django.apps import apps
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Expire every open quotation whose validity period has passed."

    def handle(self, *args, **options):
        service = apps.get_app_config("reservations").services.quotations
        expired = service.expire_overdue()
        for quotation in expired:
            self.stdout.write(f"Expired {quotation.quotation_number}")
        self.stdout.write(self.style.SUCCESS(f"{len(expired)} quotation(s) expired"))
