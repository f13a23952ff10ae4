import datetime
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from donations.models import InventoryUnit, BloodRequest
from donors.models import Donor
from hospitals.models import Hospital
from services.airtable_service import AirtableService


class ExpireInventoryCommandTests(TestCase):
    def test_writes_off_expired_rows(self):
        hospital = Hospital.objects.create(name="H1")
        expired = InventoryUnit.objects.create(hospital=hospital, blood_group='O+', units=3,
                                               expiry_date=datetime.date(2024, 1, 1))
        fresh = InventoryUnit.objects.create(hospital=hospital, blood_group='O+', units=2,
                                             expiry_date=datetime.date(2024, 2, 1))
        out = StringIO()

        call_command('expire_inventory', '--date', '2024-01-15', stdout=out)

        expired.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual((expired.units, fresh.units), (0, 2))
        self.assertIn("Wrote off 3 unit(s) across 1 inventory row(s)", out.getvalue())


@override_settings(AIRTABLE_API_KEY='key', AIRTABLE_BASE_ID='base')
class SyncAirtableCommandTests(TestCase):
    def setUp(self):
        self.hospital = Hospital.objects.create(name="H1", email="h1@example.test")
        self.donor = Donor.objects.create(name="A", age=30, blood_group='O+', health_ok=True, eligible=True)
        BloodRequest.objects.create(hospital=self.hospital, donor=self.donor, blood_group='O+', units=1)

    @mock.patch('services.airtable_service.Api')
    def test_upserts_each_table(self, api_class):
        table = api_class.return_value.table.return_value

        call_command('sync_airtable', stdout=StringIO())

        table_names = [c.args[1] for c in api_class.return_value.table.call_args_list]
        self.assertEqual(table_names, ['Donors', 'Hospitals', 'BloodRequests'])
        donors_call = table.batch_upsert.call_args_list[0]
        self.assertEqual(donors_call.args[0][0]['fields']['external_id'], self.donor.pk)
        self.assertEqual(donors_call.kwargs['key_fields'], ['external_id'])

    @mock.patch('services.airtable_service.Api')
    def test_only_option(self, api_class):
        call_command('sync_airtable', '--only', 'hospitals', stdout=StringIO())
        api_class.return_value.table.assert_called_once_with('base', 'Hospitals')

    @override_settings(AIRTABLE_API_KEY=None)
    def test_missing_credentials(self):
        with self.assertRaises(CommandError):
            call_command('sync_airtable', stdout=StringIO())


class AirtableFieldMappingTests(TestCase):
    def test_request_fields(self):
        hospital = Hospital.objects.create(name="H1")
        blood_request = BloodRequest.objects.create(hospital=hospital, blood_group='AB-', units=2)
        fields = AirtableService.request_fields(blood_request)
        self.assertEqual(fields['status'], 'pending')
        self.assertIsNone(fields['donor_id'])
        self.assertIsNone(fields['action_date'])
