import datetime

from django.contrib.auth import get_user_model
from django.test import TestCase

from donations.models import InventoryUnit, InventoryTransaction
from donors.models import Donor
from hospitals.models import Hospital


class AdminTestCase(TestCase):
    def setUp(self):
        user = get_user_model().objects.create_superuser('admin', 'admin@example.test', 'secret')
        self.client.force_login(user)


class DonorAdminTests(AdminTestCase):
    def add_donor(self, **overrides):
        payload = {
            'name': 'Maya', 'email': '', 'phone': '', 'age': 30,
            'blood_group': 'O+', 'health_ok': 'on', 'city': '', '_save': 'Save',
        }
        payload.update(overrides)
        return self.client.post('/admin/donors/donor/add/', payload)

    def test_add_computes_eligibility(self):
        response = self.add_donor()
        self.assertEqual(response.status_code, 302)
        self.assertTrue(Donor.objects.get(name='Maya').eligible)

        self.add_donor(name='Kiran', age=17)
        self.assertFalse(Donor.objects.get(name='Kiran').eligible)

    def test_registered_donor_cannot_be_edited(self):
        self.add_donor()
        donor = Donor.objects.get(name='Maya')

        response = self.client.post(f'/admin/donors/donor/{donor.pk}/change/', {
            'name': 'Changed', 'age': 80, 'blood_group': 'AB-', '_save': 'Save',
        })

        self.assertEqual(response.status_code, 302)
        donor.refresh_from_db()
        self.assertEqual((donor.name, donor.age, donor.blood_group), ('Maya', 30, 'O+'))
        self.assertTrue(donor.health_ok)
        self.assertTrue(donor.eligible)


class InventoryUnitAdminTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.hospital = Hospital.objects.create(name='H1')

    def test_add_is_not_offered(self):
        response = self.client.post('/admin/donations/inventoryunit/add/', {
            'hospital': self.hospital.pk, 'blood_group': 'O+', 'units': 3,
            'expiry_date': '2020-01-01', '_save': 'Save',
        })
        self.assertEqual(response.status_code, 403)
        self.assertFalse(InventoryUnit.objects.exists())

    def test_stock_fields_are_read_only(self):
        unit = InventoryUnit.objects.create(hospital=self.hospital, blood_group='O+', units=3,
                                            expiry_date=datetime.date(2030, 1, 1))

        response = self.client.post(f'/admin/donations/inventoryunit/{unit.pk}/change/', {
            'hospital': self.hospital.pk, 'blood_group': 'O+', 'units': 99,
            'expiry_date': '2020-01-01', '_save': 'Save',
        })

        self.assertEqual(response.status_code, 302)
        unit.refresh_from_db()
        self.assertEqual((unit.units, unit.expiry_date), (3, datetime.date(2030, 1, 1)))
        self.assertFalse(InventoryTransaction.objects.exists())
