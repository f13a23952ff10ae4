import logging
from pyairtable import Api
from django.conf import settings

logger = logging.getLogger(__name__)

TABLES = {
    'donors': 'Donors',
    'hospitals': 'Hospitals',
    'inventory': 'Inventory',
    'requests': 'BloodRequests',
}


class AirtableService:
    """Mirror of blood bank records into an Airtable base, keyed by external_id"""

    def __init__(self, api_key=None, base_id=None):
        self.api_key = api_key or settings.AIRTABLE_API_KEY
        self.base_id = base_id or settings.AIRTABLE_BASE_ID
        if not self.api_key or not self.base_id:
            raise ValueError("AIRTABLE_API_KEY and AIRTABLE_BASE_ID must be set")
        self.api = Api(self.api_key)

    def get_table(self, table_name):
        return self.api.table(self.base_id, table_name)

    def upsert(self, kind, rows):
        """Create or update `rows` (dicts with an external_id) in the table for `kind`"""
        if not rows:
            return []
        table = self.get_table(TABLES[kind])
        records = [{'fields': fields} for fields in rows]
        result = table.batch_upsert(records, key_fields=['external_id'])
        logger.info("Synced %s %s record(s) to Airtable", len(rows), kind)
        return result

    # Field mappings

    @staticmethod
    def donor_fields(donor):
        return {
            'external_id': donor.pk,
            'name': donor.name,
            'email': donor.email,
            'phone': donor.phone,
            'age': donor.age,
            'blood_group': donor.blood_group,
            'health_ok': donor.health_ok,
            'eligible': donor.eligible,
            'city': donor.city,
        }

    @staticmethod
    def hospital_fields(hospital):
        return {
            'external_id': hospital.pk,
            'name': hospital.name,
            'email': hospital.email,
            'phone': hospital.phone,
            'city': hospital.city,
        }

    @staticmethod
    def inventory_fields(unit):
        return {
            'external_id': unit.pk,
            'hospital_id': unit.hospital_id,
            'blood_group': unit.blood_group,
            'units': unit.units,
            'expiry_date': unit.expiry_date.isoformat() if unit.expiry_date else None,
        }

    @staticmethod
    def request_fields(blood_request):
        return {
            'external_id': blood_request.pk,
            'hospital_id': blood_request.hospital_id,
            'donor_id': blood_request.donor_id,
            'blood_group': blood_request.blood_group,
            'units': blood_request.units,
            'status': blood_request.status,
            'shortfall': blood_request.shortfall,
            'action_date': blood_request.action_date.isoformat() if blood_request.action_date else None,
        }
