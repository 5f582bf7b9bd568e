"""
Access to the ``FINE_POT`` settings dict with package defaults.

Usage:
    from apps.core.conf import fine_pot_setting

    votes = fine_pot_setting('DEFAULT_DISPUTE_VOTES_REQUIRED')
"""

from django.conf import settings

DEFAULTS = {
    'DEFAULT_DISPUTE_VOTES_REQUIRED': 3,
    'ALLOW_COMMUNITY_OVERRIDE': False,
    'MAX_BATCH_OFFENDERS': 50,
    'CURRENCY': 'EUR',
}


def fine_pot_setting(name):
    if name not in DEFAULTS:
        raise KeyError(f"Unknown FINE_POT setting: {name}")
    return getattr(settings, 'FINE_POT', {}).get(name, DEFAULTS[name])
