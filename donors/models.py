from django.db import models


BLOOD_GROUP_CHOICES = [
    ('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'),
    ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-'),
]

BLOOD_GROUPS = [value for value, _ in BLOOD_GROUP_CHOICES]


def normalize_blood_group(value):
    """Undo the '+' to space decoding of unescaped query strings ('O ' -> 'O+')"""
    if value is None:
        return None
    return str(value).replace(' ', '+').strip().upper()


class Donor(models.Model):
    """Registered donor. Eligibility is computed once, at registration"""
    name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    age = models.PositiveIntegerField()
    blood_group = models.CharField(max_length=5, choices=BLOOD_GROUP_CHOICES)
    health_ok = models.BooleanField(default=False)
    city = models.CharField(max_length=100, blank=True)
    eligible = models.BooleanField(default=False, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.blood_group})"

    class Meta:
        ordering = ['id']
