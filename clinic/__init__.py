"""Scheduling and billing application for the hospital backend.

This package contains the models, services, serializers, views and route
registrations for doctor shifts, patient appointments and invoices.
"""
