import datetime

from django.test import TestCase, override_settings
from django.utils import timezone
from openpyxl import load_workbook
from rest_framework.test import APITestCase

from analytics.services import AnalyticsService, ReportService
from donations.models import InventoryUnit, BloodRequest
from donors.models import Donor
from hospitals.models import Hospital

TODAY = datetime.date(2024, 3, 1)


class AnalyticsServiceTests(TestCase):
    def setUp(self):
        self.h1 = Hospital.objects.create(name="H1")
        self.h2 = Hospital.objects.create(name="H2")
        Donor.objects.create(name="A", age=30, blood_group='O+', health_ok=True, eligible=True)
        Donor.objects.create(name="B", age=16, blood_group='O+', health_ok=True, eligible=False)
        BloodRequest.objects.create(hospital=self.h1, blood_group='O+', units=2)
        BloodRequest.objects.create(hospital=self.h1, blood_group='O+', units=2, status='declined')

        InventoryUnit.objects.create(hospital=self.h1, blood_group='O+', units=6, expiry_date=datetime.date(2024, 3, 5))
        InventoryUnit.objects.create(hospital=self.h2, blood_group='O+', units=4, expiry_date=datetime.date(2024, 5, 1))
        InventoryUnit.objects.create(hospital=self.h1, blood_group='A-', units=2, expiry_date=datetime.date(2024, 2, 1))

    def test_dashboard_metrics(self):
        metrics = AnalyticsService.dashboard_metrics(today=TODAY)

        self.assertEqual(metrics['donors_total'], 2)
        self.assertEqual(metrics['donors_eligible'], 1)
        self.assertEqual(metrics['hospitals_total'], 2)
        self.assertEqual(metrics['requests'], {'pending': 1, 'approved': 0, 'declined': 1})
        self.assertEqual(metrics['stock']['O+'], 10)
        self.assertEqual(metrics['stock']['A-'], 0)
        self.assertNotIn('O+', metrics['low_stock'])
        self.assertEqual(metrics['low_stock']['A-'], 0)
        self.assertEqual(metrics['expiring_soon'], {'O+': 6})
        self.assertEqual(metrics['expired_pending'], {'A-': 2})

    @override_settings(BLOOD_BANK={'LOW_STOCK_THRESHOLD': 20})
    def test_low_stock_threshold_from_settings(self):
        metrics = AnalyticsService.dashboard_metrics(today=TODAY)
        self.assertEqual(metrics['low_stock']['O+'], 10)

    def test_inventory_summary(self):
        report = ReportService.inventory_summary(as_of=TODAY)

        self.assertEqual(report['summary'], {
            'total_units': 12, 'usable_units': 10, 'expired_units': 2, 'hospitals': 2,
        })
        self.assertEqual(report['blood_group_levels'], {'A-': 0, 'O+': 10})
        first = report['rows'][0]
        self.assertEqual(first['hospital_name'], 'H1')
        self.assertEqual(first['blood_group'], 'A-')
        self.assertEqual(first['expired_units'], 2)
        self.assertEqual(first['next_expiry'], '2024-02-01')

    def test_inventory_summary_filters(self):
        report = ReportService.inventory_summary(hospital_id=self.h2.pk, as_of=TODAY)
        self.assertEqual(report['summary']['total_units'], 4)
        report = ReportService.inventory_summary(blood_groups=['B+'], as_of=TODAY)
        self.assertEqual(report['rows'], [])
        self.assertEqual(report['summary']['total_units'], 0)

    def test_excel_export(self):
        buffer = ReportService.export_report(ReportService.inventory_summary(as_of=TODAY), 'excel')
        workbook = load_workbook(buffer)
        self.assertEqual(workbook.sheetnames, ['Summary', 'Inventory'])
        self.assertEqual(workbook['Inventory'].max_row, 4)

    def test_pdf_export(self):
        buffer = ReportService.export_report(ReportService.inventory_summary(as_of=TODAY), 'pdf')
        self.assertTrue(buffer.getvalue().startswith(b'%PDF'))

    def test_unsupported_format(self):
        with self.assertRaises(ValueError):
            ReportService.export_report({}, 'csv')


class AnalyticsApiTests(APITestCase):
    def setUp(self):
        hospital = Hospital.objects.create(name="H1")
        InventoryUnit.objects.create(hospital=hospital, blood_group='B+', units=3,
                                     expiry_date=timezone.localdate() + datetime.timedelta(days=40))

    def test_dashboard(self):
        response = self.client.get('/analytics/dashboard')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'success')
        self.assertEqual(response.data['data']['stock']['B+'], 3)

    def test_json_report(self):
        response = self.client.get('/analytics/reports/inventory')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['data']['summary']['usable_units'], 3)

    def test_file_reports(self):
        response = self.client.get('/analytics/reports/inventory', {'format': 'excel'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment', response['Content-Disposition'])
        self.assertIn('.xlsx', response['Content-Disposition'])

        response = self.client.get('/analytics/reports/inventory', {'format': 'pdf'})
        self.assertEqual(response['Content-Type'], 'application/pdf')

    def test_bad_parameters(self):
        response = self.client.get('/analytics/reports/inventory', {'format': 'csv'})
        self.assertEqual(response.status_code, 400)
        response = self.client.get('/analytics/reports/inventory', {'blood_group': 'Q'})
        self.assertEqual(response.status_code, 400)
