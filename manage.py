#!/usr/bin/env python
"""
Command line entry point for the clinic scheduling and billing service.

Points Django at ``hospital_admin.settings`` and hands over to the
management utility, e.g. ``python manage.py migrate`` or
``python manage.py seed_clinic``.
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the Django project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hospital_admin.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()