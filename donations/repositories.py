"""
Storage used by the matching engine.

MatchingService only talks to a BloodBankRepository, so the backing store and
its concurrency control can be swapped. DjangoRepository is the production
store; InMemoryRepository keeps unsaved model instances in dictionaries.

Both implement the two locking scopes the engine relies on:

- lock_request(request_id): exclusive access to one BloodRequest
- lock_inventory(hospital_id, blood_group): exclusive access to the
  non-empty inventory rows of one (hospital, blood group) key, in FEFO order

Callers always take the request lock before the inventory lock.
"""
import itertools
import threading
from contextlib import contextmanager

from django.db import transaction
from django.utils import timezone

from donors.models import Donor
from hospitals.models import Hospital
from .models import InventoryUnit, BloodRequest, InventoryTransaction, Notification


class BloodBankRepository:
    """Interface for the stores used by MatchingService"""

    # Donors
    def add_donor(self, donor):
        raise NotImplementedError

    def get_donor(self, donor_id):
        raise NotImplementedError

    def list_donors(self, blood_group=None, eligible_only=False):
        raise NotImplementedError

    # Hospitals
    def add_hospital(self, hospital):
        raise NotImplementedError

    def get_hospital(self, hospital_id):
        raise NotImplementedError

    def list_hospitals(self):
        raise NotImplementedError

    # Inventory
    def add_inventory_unit(self, unit):
        raise NotImplementedError

    def save_inventory_unit(self, unit):
        raise NotImplementedError

    def list_inventory(self, hospital_id=None, blood_group=None):
        raise NotImplementedError

    def list_expired_inventory(self, today):
        raise NotImplementedError

    def available_units(self, hospital_id, blood_group):
        return sum(unit.units for unit in self.list_inventory(hospital_id, blood_group))

    # Requests
    def add_request(self, blood_request):
        raise NotImplementedError

    def get_request(self, request_id):
        raise NotImplementedError

    def save_request(self, blood_request):
        raise NotImplementedError

    def list_requests(self, status=None):
        raise NotImplementedError

    # Audit log and notifications
    def add_transaction(self, inventory_transaction):
        raise NotImplementedError

    def list_transactions(self):
        raise NotImplementedError

    def add_notification(self, notification):
        raise NotImplementedError

    def list_notifications(self):
        raise NotImplementedError

    # Locking
    def lock_request(self, request_id):
        raise NotImplementedError

    def lock_inventory(self, hospital_id, blood_group):
        raise NotImplementedError


class DjangoRepository(BloodBankRepository):
    """ORM-backed store; locks are row locks inside a transaction"""

    def add_donor(self, donor):
        donor.save()
        return donor

    def get_donor(self, donor_id):
        if donor_id is None:
            return None
        return Donor.objects.filter(pk=donor_id).first()

    def list_donors(self, blood_group=None, eligible_only=False):
        queryset = Donor.objects.all()
        if blood_group:
            queryset = queryset.filter(blood_group=blood_group)
        if eligible_only:
            queryset = queryset.filter(eligible=True)
        return list(queryset.order_by('id'))

    def add_hospital(self, hospital):
        hospital.save()
        return hospital

    def get_hospital(self, hospital_id):
        if hospital_id is None:
            return None
        return Hospital.objects.filter(pk=hospital_id).first()

    def list_hospitals(self):
        return list(Hospital.objects.order_by('id'))

    def add_inventory_unit(self, unit):
        unit.save()
        return unit

    def save_inventory_unit(self, unit):
        unit.save(update_fields=['units'])
        return unit

    def list_inventory(self, hospital_id=None, blood_group=None):
        queryset = InventoryUnit.objects.all()
        if hospital_id is not None:
            queryset = queryset.filter(hospital_id=hospital_id)
        if blood_group:
            queryset = queryset.filter(blood_group=blood_group)
        return list(queryset.order_by('expiry_date', 'id'))

    def list_expired_inventory(self, today):
        return list(
            InventoryUnit.objects.filter(expiry_date__lt=today, units__gt=0).order_by('expiry_date', 'id')
        )

    def add_request(self, blood_request):
        blood_request.save()
        return blood_request

    def get_request(self, request_id):
        return BloodRequest.objects.filter(pk=request_id).first()

    def save_request(self, blood_request):
        blood_request.save(update_fields=['status', 'shortfall', 'action_date'])
        return blood_request

    def list_requests(self, status=None):
        queryset = BloodRequest.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        return list(queryset.order_by('id'))

    def add_transaction(self, inventory_transaction):
        inventory_transaction.save()
        return inventory_transaction

    def list_transactions(self):
        return list(InventoryTransaction.objects.all())

    def add_notification(self, notification):
        notification.save()
        return notification

    def list_notifications(self):
        return list(Notification.objects.all())

    @contextmanager
    def lock_request(self, request_id):
        with transaction.atomic():
            yield BloodRequest.objects.select_for_update().filter(pk=request_id).first()

    @contextmanager
    def lock_inventory(self, hospital_id, blood_group):
        with transaction.atomic():
            yield list(
                InventoryUnit.objects.select_for_update()
                .filter(hospital_id=hospital_id, blood_group=blood_group, units__gt=0)
                .order_by('expiry_date', 'id')
            )


class InMemoryRepository(BloodBankRepository):
    """
    Process-local store holding unsaved model instances.

    Ids are assigned from per-table counters. One threading.Lock per
    request id and per (hospital, blood group) key serialises the
    read-then-decrement sequence of concurrent approvals.
    """

    TABLES = ('donors', 'hospitals', 'inventory', 'requests', 'transactions', 'notifications')

    def __init__(self):
        self._rows = {table: {} for table in self.TABLES}
        self._counters = {table: itertools.count(1) for table in self.TABLES}
        self._mutex = threading.Lock()
        self._key_locks = {}

    def _store(self, table, obj):
        with self._mutex:
            if obj.pk is None:
                obj.pk = next(self._counters[table])
            for field in ('created_at', 'timestamp'):
                if hasattr(obj, field) and getattr(obj, field) is None:
                    setattr(obj, field, timezone.now())
            self._rows[table][obj.pk] = obj
        return obj

    def _all(self, table):
        with self._mutex:
            return sorted(self._rows[table].values(), key=lambda obj: obj.pk)

    def _get(self, table, pk):
        if pk is None:
            return None
        with self._mutex:
            return self._rows[table].get(pk)

    def _key_lock(self, key):
        with self._mutex:
            return self._key_locks.setdefault(key, threading.Lock())

    def add_donor(self, donor):
        return self._store('donors', donor)

    def get_donor(self, donor_id):
        return self._get('donors', donor_id)

    def list_donors(self, blood_group=None, eligible_only=False):
        return [
            donor for donor in self._all('donors')
            if (not blood_group or donor.blood_group == blood_group)
            and (not eligible_only or donor.eligible)
        ]

    def add_hospital(self, hospital):
        return self._store('hospitals', hospital)

    def get_hospital(self, hospital_id):
        return self._get('hospitals', hospital_id)

    def list_hospitals(self):
        return self._all('hospitals')

    def add_inventory_unit(self, unit):
        return self._store('inventory', unit)

    def save_inventory_unit(self, unit):
        return self._store('inventory', unit)

    def list_inventory(self, hospital_id=None, blood_group=None):
        rows = [
            unit for unit in self._all('inventory')
            if (hospital_id is None or unit.hospital_id == hospital_id)
            and (not blood_group or unit.blood_group == blood_group)
        ]
        return sorted(rows, key=lambda unit: (unit.expiry_date, unit.pk))

    def list_expired_inventory(self, today):
        return [unit for unit in self.list_inventory() if unit.expiry_date < today and unit.units > 0]

    def add_request(self, blood_request):
        return self._store('requests', blood_request)

    def get_request(self, request_id):
        return self._get('requests', request_id)

    def save_request(self, blood_request):
        return self._store('requests', blood_request)

    def list_requests(self, status=None):
        return [r for r in self._all('requests') if not status or r.status == status]

    def add_transaction(self, inventory_transaction):
        return self._store('transactions', inventory_transaction)

    def list_transactions(self):
        return list(reversed(self._all('transactions')))

    def add_notification(self, notification):
        return self._store('notifications', notification)

    def list_notifications(self):
        return list(reversed(self._all('notifications')))

    @contextmanager
    def lock_request(self, request_id):
        with self._key_lock(('request', request_id)):
            yield self.get_request(request_id)

    @contextmanager
    def lock_inventory(self, hospital_id, blood_group):
        with self._key_lock(('inventory', hospital_id, blood_group)):
            yield [unit for unit in self.list_inventory(hospital_id, blood_group) if unit.units > 0]
