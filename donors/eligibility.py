"""
Donor eligibility rule.

A donor qualifies when they report being in good health and their age lies
within the configured bounds (18-65 inclusive unless BLOOD_BANK overrides
ELIGIBILITY_MIN_AGE / ELIGIBILITY_MAX_AGE).
"""
from core.conf import blood_bank_setting


def age_bounds():
    return blood_bank_setting('ELIGIBILITY_MIN_AGE'), blood_bank_setting('ELIGIBILITY_MAX_AGE')


def is_donor_eligible(age, health_ok, min_age=None, max_age=None):
    """
    Args:
        age (int): Donor age in years
        health_ok (bool): Self-reported health flag
        min_age, max_age (int): Inclusive bounds, configured values when omitted

    Returns:
        bool: True if the donor may donate
    """
    if min_age is None or max_age is None:
        default_min, default_max = age_bounds()
        min_age = default_min if min_age is None else min_age
        max_age = default_max if max_age is None else max_age

    if health_ok is not True:
        return False
    if isinstance(age, bool) or not isinstance(age, int):
        return False
    return min_age <= age <= max_age


def evaluate_donor_eligibility(donor, min_age=None, max_age=None):
    return is_donor_eligible(donor.age, donor.health_ok, min_age=min_age, max_age=max_age)
