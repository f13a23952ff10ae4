from django.db import models
from django.core.validators import MinValueValidator
from donors.models import BLOOD_GROUP_CHOICES


class InventoryUnit(models.Model):
    """A batch of blood units received by a hospital, consumed first-expiry-first-out"""
    hospital = models.ForeignKey('hospitals.Hospital', on_delete=models.CASCADE, related_name='inventory')
    blood_group = models.CharField(max_length=5, choices=BLOOD_GROUP_CHOICES)
    units = models.PositiveIntegerField()
    expiry_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.blood_group}: {self.units} unit(s), expires {self.expiry_date}"

    def is_expired(self, today):
        return self.expiry_date < today

    class Meta:
        ordering = ['expiry_date', 'id']
        verbose_name_plural = "Inventory units"
        indexes = [
            models.Index(fields=['hospital', 'blood_group', 'expiry_date'], name='inventory_fefo_idx'),
        ]


class BloodRequest(models.Model):
    """Blood request raised for a hospital, decided exactly once"""
    PENDING = 'pending'
    APPROVED = 'approved'
    DECLINED = 'declined'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (DECLINED, 'Declined'),
    ]
    TERMINAL_STATUSES = (APPROVED, DECLINED)

    hospital = models.ForeignKey('hospitals.Hospital', on_delete=models.CASCADE, related_name='blood_requests')
    donor = models.ForeignKey('donors.Donor', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='blood_requests')
    blood_group = models.CharField(max_length=5, choices=BLOOD_GROUP_CHOICES)
    units = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    shortfall = models.PositiveIntegerField(default=0)  # lenient approvals only
    created_at = models.DateTimeField(auto_now_add=True)
    action_date = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Request for {self.units} unit(s) of {self.blood_group}"

    @property
    def is_pending(self):
        return self.status == self.PENDING

    class Meta:
        ordering = ['id']


class InventoryTransaction(models.Model):
    """Audit log for all inventory changes"""
    INTAKE = 'intake'
    REQUEST = 'request'
    EXPIRY = 'expiry'

    TRANSACTION_TYPES = [
        (INTAKE, 'Donation intake'),
        (REQUEST, 'Blood request'),
        (EXPIRY, 'Expiry write-off'),
    ]

    inventory_unit = models.ForeignKey(InventoryUnit, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    units = models.IntegerField()  # negative for consumption and write-offs
    blood_group = models.CharField(max_length=5, choices=BLOOD_GROUP_CHOICES)
    reference_id = models.IntegerField(null=True, blank=True)  # BloodRequest id for consumption
    timestamp = models.DateTimeField(auto_now_add=True)
    notes = models.TextField(blank=True)

    def __str__(self):
        return f"{self.transaction_type}: {self.units} of {self.blood_group}"

    class Meta:
        ordering = ['-timestamp', '-id']


class Notification(models.Model):
    """Outgoing message kept as a record; nothing is delivered"""
    recipient_email = models.EmailField(blank=True)
    recipient_phone = models.CharField(max_length=20, blank=True)
    subject = models.CharField(max_length=200)
    message = models.TextField()
    meta = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.subject

    class Meta:
        ordering = ['-created_at', '-id']
