"""
Consultation pricing table.

The base fee and the per-specialization premium rates come from
settings (``BILLING_BASE_CONSULTATION_FEE`` and
``BILLING_SPECIALIZATION_RATES``).  All arithmetic is done on
:class:`decimal.Decimal` and rounded half-up to whole cents.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

CENTS = Decimal('0.01')


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def base_consultation_fee() -> Decimal:
    return to_money(settings.BILLING_BASE_CONSULTATION_FEE)


def premium_rate(specialization: str) -> Decimal:
    rates = getattr(settings, 'BILLING_SPECIALIZATION_RATES', {})
    return Decimal(str(rates.get(specialization, '0')))


def premium_for(specialization: str, base_amount=None) -> Decimal:
    """Return the premium a doctor of ``specialization`` adds to ``base_amount``."""
    base = to_money(base_amount) if base_amount is not None else base_consultation_fee()
    return (base * premium_rate(specialization)).quantize(CENTS, rounding=ROUND_HALF_UP)
