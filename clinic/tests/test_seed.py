import pytest
from django.contrib.auth.models import User
from django.core.management import call_command

from clinic.models import Doctor, Patient, Shift
from clinic.permissions import is_billing_staff, is_scheduling_staff

pytestmark = pytest.mark.django_db


def test_seed_is_idempotent():
    call_command('seed_clinic', days=2)
    counts = (Doctor.objects.count(), Patient.objects.count(), Shift.objects.count())
    call_command('seed_clinic', days=2)
    assert (Doctor.objects.count(), Patient.objects.count(), Shift.objects.count()) == counts
    assert counts == (4, 3, 16)


def test_seed_creates_role_accounts():
    call_command('seed_clinic', days=1)
    assert is_scheduling_staff(User.objects.get(username='reception1'))
    assert is_billing_staff(User.objects.get(username='billing1'))
    assert not is_billing_staff(User.objects.get(username='reception1'))
