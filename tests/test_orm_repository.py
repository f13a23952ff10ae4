import datetime

from django.db import connection
from django.test import TestCase

from core.exceptions import InvalidStateTransition, InsufficientInventory
from donations.models import InventoryUnit, BloodRequest, InventoryTransaction, Notification
from donations.repositories import DjangoRepository
from donations.services import MatchingService
from donors.models import Donor
from hospitals.models import Hospital


class DjangoRepositoryTests(TestCase):
    """The engine rules hold against the ORM-backed store"""

    def setUp(self):
        self.service = MatchingService(repository=DjangoRepository(), inventory_mode='strict')
        self.hospital = Hospital.objects.create(name="H1", email="h1@example.test")

    def test_fefo_scenario(self):
        early = InventoryUnit.objects.create(hospital=self.hospital, blood_group='O+', units=3,
                                             expiry_date=datetime.date(2024, 1, 1))
        late = InventoryUnit.objects.create(hospital=self.hospital, blood_group='O+', units=5,
                                            expiry_date=datetime.date(2024, 6, 1))
        blood_request = self.service.create_request(self.hospital.pk, 'O+', 4)

        self.service.transition_request_status(blood_request.pk, 'approved')

        early.refresh_from_db()
        late.refresh_from_db()
        blood_request.refresh_from_db()
        self.assertEqual((early.units, late.units), (0, 4))
        self.assertEqual(blood_request.status, BloodRequest.APPROVED)
        self.assertEqual(
            InventoryTransaction.objects.filter(transaction_type='request', reference_id=blood_request.pk).count(),
            2
        )

    def test_strict_shortfall_rolls_back(self):
        unit = InventoryUnit.objects.create(hospital=self.hospital, blood_group='B+', units=1,
                                            expiry_date=datetime.date(2030, 1, 1))
        blood_request = self.service.create_request(self.hospital.pk, 'B+', 2)

        with self.assertRaises(InsufficientInventory):
            self.service.transition_request_status(blood_request.pk, 'approved')

        unit.refresh_from_db()
        blood_request.refresh_from_db()
        self.assertEqual(unit.units, 1)
        self.assertEqual(blood_request.status, BloodRequest.PENDING)
        self.assertFalse(Notification.objects.filter(meta__request_id=blood_request.pk).exists())

    def test_decline_then_approve(self):
        unit = InventoryUnit.objects.create(hospital=self.hospital, blood_group='O+', units=5,
                                            expiry_date=datetime.date(2030, 1, 1))
        blood_request = self.service.create_request(self.hospital.pk, 'O+', 4)
        self.service.transition_request_status(blood_request.pk, 'declined')

        with self.assertRaises(InvalidStateTransition):
            self.service.transition_request_status(blood_request.pk, 'approved')

        unit.refresh_from_db()
        blood_request.refresh_from_db()
        self.assertEqual(unit.units, 5)
        self.assertEqual(blood_request.status, BloodRequest.DECLINED)

    def test_registered_donor_is_persisted_with_eligibility(self):
        donor = self.service.register_donor(name="Ravi", age=17, blood_group='A-', health_ok=True)
        self.assertFalse(Donor.objects.get(pk=donor.pk).eligible)
        self.assertEqual(Notification.objects.count(), 1)

    def test_list_donors_filters(self):
        self.service.register_donor(name="A", age=30, blood_group='A-', health_ok=True)
        self.service.register_donor(name="B", age=30, blood_group='A-', health_ok=False)
        self.service.register_donor(name="C", age=30, blood_group='A+', health_ok=True)
        names = [d.name for d in self.service.find_compatible_donors('A-', eligible_only=True)]
        self.assertEqual(names, ["A"])

    def test_expire_inventory(self):
        expired = InventoryUnit.objects.create(hospital=self.hospital, blood_group='O+', units=3,
                                               expiry_date=datetime.date(2024, 1, 1))
        written_off = self.service.expire_inventory(today=datetime.date(2024, 1, 2))
        expired.refresh_from_db()
        self.assertEqual(expired.units, 0)
        self.assertEqual(len(written_off), 1)
        self.assertEqual(InventoryTransaction.objects.get(transaction_type='expiry').units, -3)


class DatabaseSettingsTests(TestCase):
    def test_sqlite_writers_lock_at_begin(self):
        options = connection.settings_dict['OPTIONS']
        self.assertEqual(options['transaction_mode'], 'IMMEDIATE')
        self.assertGreater(options['timeout'], 0)
