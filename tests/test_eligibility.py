from django.test import SimpleTestCase, override_settings

from donors.eligibility import is_donor_eligible, evaluate_donor_eligibility
from donors.models import Donor


class DonorEligibilityTests(SimpleTestCase):
    def test_healthy_adult_is_eligible(self):
        self.assertTrue(is_donor_eligible(30, True))

    def test_minor_is_not_eligible(self):
        self.assertFalse(is_donor_eligible(17, True))

    def test_unhealthy_donor_is_not_eligible(self):
        self.assertFalse(is_donor_eligible(30, False))

    def test_unhealthy_donor_never_eligible_at_any_age(self):
        for age in range(0, 120):
            self.assertFalse(is_donor_eligible(age, False), age)

    def test_age_bounds_are_inclusive(self):
        self.assertTrue(is_donor_eligible(18, True))
        self.assertTrue(is_donor_eligible(65, True))
        self.assertFalse(is_donor_eligible(66, True))

    def test_age_outside_bounds_is_not_eligible(self):
        for age in list(range(0, 18)) + list(range(66, 120)):
            self.assertFalse(is_donor_eligible(age, True), age)

    def test_non_integer_age_is_not_eligible(self):
        self.assertFalse(is_donor_eligible(None, True))
        self.assertFalse(is_donor_eligible("30", True))
        self.assertFalse(is_donor_eligible(True, True))

    def test_truthy_health_flag_must_be_a_real_boolean(self):
        self.assertFalse(is_donor_eligible(30, "yes"))

    @override_settings(BLOOD_BANK={'ELIGIBILITY_MIN_AGE': 16, 'ELIGIBILITY_MAX_AGE': 70})
    def test_bounds_come_from_settings(self):
        self.assertTrue(is_donor_eligible(16, True))
        self.assertTrue(is_donor_eligible(70, True))
        self.assertFalse(is_donor_eligible(71, True))

    def test_explicit_bounds_override_settings(self):
        self.assertFalse(is_donor_eligible(30, True, min_age=40, max_age=50))

    def test_evaluate_reads_donor_fields(self):
        donor = Donor(name="Asha", age=45, blood_group='A+', health_ok=True)
        self.assertTrue(evaluate_donor_eligibility(donor))
        donor.health_ok = False
        self.assertFalse(evaluate_donor_eligibility(donor))
