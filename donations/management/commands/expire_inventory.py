from django.core.management.base import BaseCommand
from django.utils.dateparse import parse_date

from donations.services import MatchingService


class Command(BaseCommand):
    help = "Write off inventory rows whose expiry date has passed"

    def add_arguments(self, parser):
        parser.add_argument('--date', help="Treat this YYYY-MM-DD date as today")

    def handle(self, *args, **options):
        today = parse_date(options['date']) if options.get('date') else None
        written_off = MatchingService().expire_inventory(today=today)

        total = sum(units for _, units in written_off)
        self.stdout.write(self.style.SUCCESS(
            f"Wrote off {total} unit(s) across {len(written_off)} inventory row(s)"
        ))
