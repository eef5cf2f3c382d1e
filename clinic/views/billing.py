"""
Billing endpoints.

Invoices are normally produced when an appointment is completed; the
``POST`` on an appointment's invoice is the manual path and answers
``409`` with ``invoice_already_exists`` once an invoice is on record.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..permissions import IsBillingStaffOrReadOnly
from ..serializers.scheduling import InvoiceListQuerySerializer
from ..services import billing as billing_service
from ..services import directory


@api_view(['GET', 'POST'])
@permission_classes([IsBillingStaffOrReadOnly])
def appointment_invoice(request, pk: int):
    if request.method == 'GET':
        invoice = billing_service.get_invoice_for_appointment(pk)
        return Response({'ok': True, 'data': billing_service.format_invoice(invoice)})
    invoice = billing_service.generate_invoice_for_appointment(pk)
    return Response({'ok': True, 'data': billing_service.format_invoice(invoice)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_invoices(request, pk: int):
    directory.get_patient(pk)
    items = billing_service.list_invoices_for_patient(pk)
    return Response({'ok': True, 'data': [billing_service.format_invoice(i) for i in items]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoices_list(request):
    q = InvoiceListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    payment_status = q.validated_data.get('status')
    if payment_status:
        items = billing_service.list_invoices_by_status(payment_status)
    else:
        items = billing_service.list_invoices()
    return Response({'ok': True, 'data': [billing_service.format_invoice(i) for i in items]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk: int):
    return Response({'ok': True, 'data': billing_service.format_invoice(billing_service.get_invoice(pk))})
