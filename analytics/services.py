import io
import logging
from datetime import timedelta
import pandas as pd
import numpy as np
from django.utils import timezone
from django.db.models import Sum
from core.conf import blood_bank_setting
from donors.models import Donor, BLOOD_GROUPS
from hospitals.models import Hospital
from donations.models import BloodRequest, InventoryUnit
from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ['hospital_id', 'hospital_name', 'blood_group', 'units', 'expired_units', 'next_expiry']


def to_native(value):
    """Convert pandas/numpy scalars to JSON-friendly Python values"""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp,)):
        return value.date().isoformat()
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if pd.isna(value):
        return None
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    return value


class AnalyticsService:
    @classmethod
    def dashboard_metrics(cls, today=None):
        """Current counts and stock levels for the dashboard"""
        today = today or timezone.localdate()
        return {
            'donors_total': Donor.objects.count(),
            'donors_eligible': Donor.objects.filter(eligible=True).count(),
            'hospitals_total': Hospital.objects.count(),
            'requests': cls._get_request_counts(),
            'stock': cls._get_stock_levels(today),
            'low_stock': cls._get_low_stock_levels(today),
            'expiring_soon': cls._get_expiring_units(today),
            'expired_pending': cls._get_expired_units(today),
        }

    @classmethod
    def _get_request_counts(cls):
        counts = {value: 0 for value, _ in BloodRequest.STATUS_CHOICES}
        for status in counts:
            counts[status] = BloodRequest.objects.filter(status=status).count()
        return counts

    @staticmethod
    def _units_by_group(queryset):
        levels = {blood_group: 0 for blood_group in BLOOD_GROUPS}
        for row in queryset.values('blood_group').annotate(total=Sum('units')):
            levels[row['blood_group']] = row['total'] or 0
        return levels

    @classmethod
    def _get_stock_levels(cls, today):
        """Usable (unexpired) units per blood group across all hospitals."""
        return cls._units_by_group(InventoryUnit.objects.filter(units__gt=0, expiry_date__gte=today))

    @classmethod
    def _get_low_stock_levels(cls, today):
        threshold = blood_bank_setting('LOW_STOCK_THRESHOLD')
        return {
            blood_group: units
            for blood_group, units in cls._get_stock_levels(today).items()
            if units < threshold
        }

    @classmethod
    def _get_expiring_units(cls, today):
        """Units expiring within EXPIRING_SOON_DAYS, per blood group."""
        horizon = today + timedelta(days=blood_bank_setting('EXPIRING_SOON_DAYS'))
        levels = cls._units_by_group(
            InventoryUnit.objects.filter(units__gt=0, expiry_date__gte=today, expiry_date__lte=horizon)
        )
        return {blood_group: units for blood_group, units in levels.items() if units}

    @classmethod
    def _get_expired_units(cls, today):
        levels = cls._units_by_group(InventoryUnit.objects.filter(units__gt=0, expiry_date__lt=today))
        return {blood_group: units for blood_group, units in levels.items() if units}


class ReportService:
    @classmethod
    def inventory_summary(cls, hospital_id=None, blood_groups=None, as_of=None):
        """Inventory per hospital and blood group, with expired units broken out."""
        as_of = as_of or timezone.localdate()

        queryset = InventoryUnit.objects.filter(units__gt=0)
        if hospital_id is not None:
            queryset = queryset.filter(hospital_id=hospital_id)
        if blood_groups:
            queryset = queryset.filter(blood_group__in=blood_groups)

        records = list(queryset.values('hospital_id', 'hospital__name', 'blood_group', 'units', 'expiry_date'))
        df = pd.DataFrame(records, columns=['hospital_id', 'hospital__name', 'blood_group', 'units', 'expiry_date'])

        if df.empty:
            return {
                'as_of': as_of.isoformat(),
                'summary': {
                    'total_units': 0,
                    'usable_units': 0,
                    'expired_units': 0,
                    'hospitals': 0,
                },
                'blood_group_levels': {},
                'rows': [],
            }

        df = df.rename(columns={'hospital__name': 'hospital_name'})
        df['expiry_date'] = pd.to_datetime(df['expiry_date'])
        df['expired_units'] = np.where(df['expiry_date'] < pd.Timestamp(as_of), df['units'], 0)
        df['usable_units'] = df['units'] - df['expired_units']

        grouped = (
            df.groupby(['hospital_id', 'hospital_name', 'blood_group'], as_index=False)
            .agg(
                units=('units', 'sum'),
                expired_units=('expired_units', 'sum'),
                next_expiry=('expiry_date', 'min'),
            )
            .sort_values(['hospital_id', 'blood_group'])
        )
        by_group = df.groupby('blood_group')['usable_units'].sum()

        rows = [
            {column: to_native(record[column]) for column in REPORT_COLUMNS}
            for record in grouped.to_dict('records')
        ]
        return {
            'as_of': as_of.isoformat(),
            'summary': {
                'total_units': to_native(df['units'].sum()),
                'usable_units': to_native(df['usable_units'].sum()),
                'expired_units': to_native(df['expired_units'].sum()),
                'hospitals': to_native(df['hospital_id'].nunique()),
            },
            'blood_group_levels': {blood_group: to_native(units) for blood_group, units in by_group.items()},
            'rows': rows,
        }

    @classmethod
    def export_report(cls, data, format='json'):
        """Export report data in specified format."""
        logger.info("Exporting inventory report as %s", format)
        if format == 'json':
            return data
        elif format == 'excel':
            return cls._export_to_excel(data)
        elif format == 'pdf':
            return cls._export_to_pdf(data)
        else:
            raise ValueError(f"Unsupported format: {format}")

    @staticmethod
    def _export_to_excel(data):
        """Export report data to an in-memory .xlsx file."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Summary"

        ws.append(['Metric', 'Value'])
        ws.append(['as_of', data['as_of']])
        for metric, value in data['summary'].items():
            ws.append([metric, value])

        ws = wb.create_sheet("Inventory")
        ws.append(REPORT_COLUMNS)
        for row in data['rows']:
            ws.append([row[column] for column in REPORT_COLUMNS])

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    @staticmethod
    def _export_to_pdf(data):
        """Export report data to an in-memory PDF."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=landscape(letter))
        elements = []
        styles = getSampleStyleSheet()

        elements.append(Paragraph(f"Inventory Report ({data['as_of']})", styles['Title']))

        summary_data = [['Metric', 'Value']]
        for metric, value in data['summary'].items():
            summary_data.append([metric, str(value)])
        elements.append(ReportService._styled_table(summary_data))
        elements.append(Spacer(1, 12))

        if data['rows']:
            detail_data = [REPORT_COLUMNS]
            for row in data['rows']:
                detail_data.append(['' if row[c] is None else str(row[c]) for c in REPORT_COLUMNS])
            elements.append(ReportService._styled_table(detail_data))

        doc.build(elements)
        buffer.seek(0)
        return buffer

    @staticmethod
    def _styled_table(table_data):
        table = Table(table_data)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
            ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
            ('TEXTCOLOR', (0, 1), (-1, -1), colors.black),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('GRID', (0, 0), (-1, -1), 1, colors.black)
        ]))
        return table
