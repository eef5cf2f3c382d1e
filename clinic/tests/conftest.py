import pytest
from django.contrib.auth.models import Group, User
from django.utils import timezone

from clinic.models import Doctor, Patient


@pytest.fixture
def make_doctor(db):
    def _make(license_number='LIC-1000', specialization='Cardiology', full_name='Dr. Test'):
        now = timezone.now()
        return Doctor.objects.create(
            full_name=full_name,
            license_number=license_number,
            specialization=specialization,
            created_at=now,
            updated_at=now,
        )
    return _make


@pytest.fixture
def doctor(make_doctor):
    return make_doctor()


@pytest.fixture
def patient(db):
    now = timezone.now()
    return Patient.objects.create(first_name='John', last_name='Smith', created_at=now, updated_at=now)


@pytest.fixture
def reception_user(db, settings):
    group, _ = Group.objects.get_or_create(name=settings.RECEPTION_GROUP)
    user = User.objects.create_user(username='reception1', password='P@ssw0rd1')
    user.groups.add(group)
    return user


@pytest.fixture
def billing_user(db, settings):
    group, _ = Group.objects.get_or_create(name=settings.BILLING_GROUP)
    user = User.objects.create_user(username='billing1', password='P@ssw0rd1')
    user.groups.add(group)
    return user
