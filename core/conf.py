from django.conf import settings

DEFAULTS = {
    'ELIGIBILITY_MIN_AGE': 18,
    'ELIGIBILITY_MAX_AGE': 65,
    'INVENTORY_MODE': 'strict',
    'CHECK_STOCK_ON_CREATE': False,
    'LOW_STOCK_THRESHOLD': 5,
    'EXPIRING_SOON_DAYS': 7,
}

INVENTORY_MODES = ('strict', 'lenient')


def blood_bank_setting(name):
    """Read a value from settings.BLOOD_BANK, falling back to DEFAULTS"""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown BLOOD_BANK setting: {name}")
    overrides = getattr(settings, 'BLOOD_BANK', None) or {}
    return overrides.get(name, DEFAULTS[name])
