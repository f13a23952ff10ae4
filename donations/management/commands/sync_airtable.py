from django.core.management.base import BaseCommand, CommandError

from donations.repositories import DjangoRepository
from services.airtable_service import AirtableService


class Command(BaseCommand):
    help = "Push donors, hospitals, inventory and requests to Airtable"

    def add_arguments(self, parser):
        parser.add_argument(
            '--only',
            choices=['donors', 'hospitals', 'inventory', 'requests'],
            action='append',
            help="Sync only the given table (repeatable)",
        )

    def handle(self, *args, **options):
        try:
            airtable = AirtableService()
        except ValueError as e:
            raise CommandError(str(e))

        repository = DjangoRepository()
        sources = {
            'donors': (repository.list_donors, airtable.donor_fields),
            'hospitals': (repository.list_hospitals, airtable.hospital_fields),
            'inventory': (repository.list_inventory, airtable.inventory_fields),
            'requests': (repository.list_requests, airtable.request_fields),
        }

        for kind in options.get('only') or list(sources):
            load, to_fields = sources[kind]
            rows = [to_fields(obj) for obj in load()]
            self.stdout.write(f"Migrating {kind} data...")
            airtable.upsert(kind, rows)
            self.stdout.write(self.style.SUCCESS(f"Synced {len(rows)} {kind} record(s)"))
