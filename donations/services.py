import logging
import datetime

from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from core.conf import blood_bank_setting, INVENTORY_MODES
from core.exceptions import ValidationError, NotFoundError, InvalidStateTransition, InsufficientInventory
from donors import eligibility
from donors.models import Donor, BLOOD_GROUPS, normalize_blood_group
from hospitals.models import Hospital
from .models import InventoryUnit, BloodRequest, InventoryTransaction, Notification
from .repositories import DjangoRepository

logger = logging.getLogger(__name__)


def plan_fefo_consumption(rows, units):
    """
    Split a request for `units` over inventory rows, earliest expiry first.

    Args:
        rows: InventoryUnit rows for one (hospital, blood group) key
        units (int): Units to take

    Returns:
        tuple: ([(row, units_taken), ...], shortfall)
    """
    plan = []
    remaining = units
    for row in sorted(rows, key=lambda r: (r.expiry_date, r.pk)):
        if remaining <= 0:
            break
        taken = min(row.units, remaining)
        if taken <= 0:
            continue
        plan.append((row, taken))
        remaining -= taken
    return plan, remaining


class MatchingService:
    """
    Donor eligibility and request matching against hospital inventory.

    All reads and writes go through the injected repository, so the same
    rules run against the ORM or against InMemoryRepository.
    """

    def __init__(self, repository=None, inventory_mode=None, check_stock_on_create=None,
                 min_age=None, max_age=None):
        self.repository = repository if repository is not None else DjangoRepository()
        self.inventory_mode = inventory_mode or blood_bank_setting('INVENTORY_MODE')
        if self.inventory_mode not in INVENTORY_MODES:
            raise ImproperlyConfigured(
                f"BLOOD_BANK['INVENTORY_MODE'] must be one of {', '.join(INVENTORY_MODES)}"
            )
        if check_stock_on_create is None:
            check_stock_on_create = blood_bank_setting('CHECK_STOCK_ON_CREATE')
        self.check_stock_on_create = check_stock_on_create
        self.min_age = blood_bank_setting('ELIGIBILITY_MIN_AGE') if min_age is None else min_age
        self.max_age = blood_bank_setting('ELIGIBILITY_MAX_AGE') if max_age is None else max_age

    # Donors

    def evaluate_donor_eligibility(self, donor):
        return eligibility.evaluate_donor_eligibility(donor, min_age=self.min_age, max_age=self.max_age)

    def register_donor(self, name, age, blood_group, health_ok=False, email='', phone='', city=''):
        """Create a donor with its eligibility flag fixed at registration time"""
        if not name:
            raise ValidationError("Donor name is required", errors={'name': ['This field is required.']})
        if isinstance(age, bool) or not isinstance(age, int) or age < 0:
            raise ValidationError("Age must be a non-negative integer", errors={'age': [f"Invalid age: {age!r}"]})
        if not isinstance(health_ok, bool):
            raise ValidationError("health_ok must be a boolean", errors={'health_ok': [f"Invalid value: {health_ok!r}"]})
        blood_group = self._validate_blood_group(blood_group)

        donor = Donor(
            name=name,
            email=email or '',
            phone=phone or '',
            age=age,
            blood_group=blood_group,
            health_ok=health_ok,
            city=city or '',
        )
        donor.eligible = self.evaluate_donor_eligibility(donor)
        self.repository.add_donor(donor)
        logger.info("Registered donor %s (%s), eligible=%s", donor.pk, donor.blood_group, donor.eligible)

        self._record_notification(
            subject="Donor registration received",
            message=(
                f"Hi {donor.name}, your registration is saved. "
                f"Eligibility: {'Eligible' if donor.eligible else 'Not Eligible'}."
            ),
            email=donor.email,
            phone=donor.phone,
            meta={'donor_id': donor.pk, 'eligible': donor.eligible},
        )
        return donor

    def find_compatible_donors(self, blood_group, eligible_only=False):
        """Donors of exactly `blood_group`, in registration order"""
        blood_group = self._validate_blood_group(blood_group)
        return self.repository.list_donors(blood_group=blood_group, eligible_only=eligible_only)

    # Hospitals

    def register_hospital(self, name, email='', phone='', city=''):
        if not name:
            raise ValidationError("Hospital name is required", errors={'name': ['This field is required.']})
        hospital = Hospital(name=name, email=email or '', phone=phone or '', city=city or '')
        self.repository.add_hospital(hospital)
        logger.info("Added hospital %s (%s)", hospital.pk, hospital.name)
        return hospital

    # Inventory

    def receive_inventory(self, hospital_id, blood_group, units, expiry_date, today=None):
        """Record a donation intake as a new inventory row"""
        self._validate_units(units)
        blood_group = self._validate_blood_group(blood_group)
        hospital = self._require_hospital(hospital_id)

        today = today or timezone.localdate()
        if isinstance(expiry_date, datetime.datetime):
            expiry_date = expiry_date.date()
        if not isinstance(expiry_date, datetime.date):
            raise ValidationError("Expiry date is required", errors={'expiry_date': ['A valid date is required.']})
        if expiry_date <= today:
            raise ValidationError(
                "Expiry date must be in the future",
                errors={'expiry_date': [f"{expiry_date.isoformat()} is not after {today.isoformat()}"]}
            )

        unit = InventoryUnit(hospital_id=hospital.pk, blood_group=blood_group, units=units, expiry_date=expiry_date)
        self.repository.add_inventory_unit(unit)
        self.repository.add_transaction(InventoryTransaction(
            inventory_unit=unit,
            transaction_type=InventoryTransaction.INTAKE,
            units=units,
            blood_group=blood_group,
        ))
        logger.info("Received %s unit(s) of %s at hospital %s, expiring %s",
                    units, blood_group, hospital.pk, expiry_date)
        return unit

    def expire_inventory(self, today=None):
        """
        Write off rows whose expiry date has passed.

        Returns:
            list: (row, units_written_off) pairs
        """
        today = today or timezone.localdate()
        keys = []
        for row in self.repository.list_expired_inventory(today):
            key = (row.hospital_id, row.blood_group)
            if key not in keys:
                keys.append(key)

        written_off = []
        for hospital_id, blood_group in keys:
            with self.repository.lock_inventory(hospital_id, blood_group) as rows:
                for row in rows:
                    if not row.is_expired(today) or row.units <= 0:
                        continue
                    units = row.units
                    row.units = 0
                    self.repository.save_inventory_unit(row)
                    self.repository.add_transaction(InventoryTransaction(
                        inventory_unit=row,
                        transaction_type=InventoryTransaction.EXPIRY,
                        units=-units,
                        blood_group=row.blood_group,
                        notes=f"Expired on {row.expiry_date.isoformat()}",
                    ))
                    written_off.append((row, units))
                    logger.warning("Wrote off %s expired unit(s) of %s at hospital %s",
                                   units, row.blood_group, row.hospital_id)
        return written_off

    # Requests

    def create_request(self, hospital_id, blood_group, units, donor_id=None):
        """Open a pending request; stock is checked at approval unless CHECK_STOCK_ON_CREATE is set"""
        self._validate_units(units)
        blood_group = self._validate_blood_group(blood_group)
        hospital = self._require_hospital(hospital_id)

        donor = None
        if donor_id is not None:
            donor = self.repository.get_donor(donor_id)
            if donor is None:
                raise ValidationError(
                    f"Donor {donor_id} does not exist",
                    errors={'donor_id': [f"Unknown donor: {donor_id}"]}
                )

        if self.check_stock_on_create:
            available = self.repository.available_units(hospital.pk, blood_group)
            if available < units:
                raise InsufficientInventory(requested=units, available=available)

        blood_request = BloodRequest(
            hospital_id=hospital.pk,
            donor_id=donor.pk if donor else None,
            blood_group=blood_group,
            units=units,
            status=BloodRequest.PENDING,
        )
        self.repository.add_request(blood_request)
        logger.info("Created request %s for %s unit(s) of %s at hospital %s",
                    blood_request.pk, units, blood_group, hospital.pk)
        return blood_request

    def transition_request_status(self, request_id, new_status):
        """Approve or decline a pending request; approval consumes inventory FEFO"""
        if new_status not in BloodRequest.TERMINAL_STATUSES:
            raise ValidationError(
                "Status must be either 'approved' or 'declined'",
                errors={'status': [f"Invalid status: {new_status!r}"]}
            )

        with self.repository.lock_request(request_id) as blood_request:
            if blood_request is None:
                raise NotFoundError(f"Blood request {request_id} not found")
            if not blood_request.is_pending:
                raise InvalidStateTransition(
                    f"Request {request_id} is already {blood_request.status}; "
                    "only pending requests can be approved or declined"
                )

            if new_status == BloodRequest.APPROVED:
                blood_request.shortfall = self._consume_inventory(blood_request)

            blood_request.status = new_status
            blood_request.action_date = timezone.now()
            self.repository.save_request(blood_request)
            self._notify_hospital(blood_request)

        logger.info("Request %s %s", blood_request.pk, blood_request.status)
        return blood_request

    # Helpers

    def _consume_inventory(self, blood_request):
        with self.repository.lock_inventory(blood_request.hospital_id, blood_request.blood_group) as rows:
            available = sum(row.units for row in rows)
            if available < blood_request.units and self.inventory_mode == 'strict':
                raise InsufficientInventory(requested=blood_request.units, available=available)

            plan, shortfall = plan_fefo_consumption(rows, blood_request.units)
            for row, taken in plan:
                row.units -= taken
                self.repository.save_inventory_unit(row)
                self.repository.add_transaction(InventoryTransaction(
                    inventory_unit=row,
                    transaction_type=InventoryTransaction.REQUEST,
                    units=-taken,
                    blood_group=blood_request.blood_group,
                    reference_id=blood_request.pk,
                ))

        if shortfall:
            logger.warning(
                "Approved request %s with a shortfall of %s unit(s) of %s at hospital %s",
                blood_request.pk, shortfall, blood_request.blood_group, blood_request.hospital_id
            )
        return shortfall

    def _notify_hospital(self, blood_request):
        hospital = self.repository.get_hospital(blood_request.hospital_id)
        message = f"Request #{blood_request.pk} for {blood_request.units} unit(s) of {blood_request.blood_group} was {blood_request.status}."
        if blood_request.shortfall:
            message += f" {blood_request.shortfall} unit(s) could not be supplied from stock."
        self._record_notification(
            subject=f"Blood request {blood_request.status}",
            message=message,
            email=hospital.email if hospital else '',
            phone=hospital.phone if hospital else '',
            meta={'request_id': blood_request.pk, 'status': blood_request.status},
        )

    def _record_notification(self, subject, message, email='', phone='', meta=None):
        return self.repository.add_notification(Notification(
            recipient_email=email or '',
            recipient_phone=phone or '',
            subject=subject,
            message=message,
            meta=meta or {},
        ))

    def _require_hospital(self, hospital_id):
        hospital = self.repository.get_hospital(hospital_id)
        if hospital is None:
            raise ValidationError(
                f"Hospital {hospital_id} does not exist",
                errors={'hospital_id': [f"Unknown hospital: {hospital_id}"]}
            )
        return hospital

    @staticmethod
    def _validate_units(units):
        if isinstance(units, bool) or not isinstance(units, int) or units <= 0:
            raise ValidationError(
                "Units must be a positive integer",
                errors={'units': [f"Invalid units: {units!r}"]}
            )

    @staticmethod
    def _validate_blood_group(blood_group):
        normalized = normalize_blood_group(blood_group)
        if normalized not in BLOOD_GROUPS:
            raise ValidationError(
                f"Unknown blood group: {blood_group!r}",
                errors={'blood_group': [f"Must be one of {', '.join(BLOOD_GROUPS)}"]}
            )
        return normalized
