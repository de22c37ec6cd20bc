import logging
from decimal import Decimal

from django.conf import settings
from django.db import models
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.catalog.models import Package
from apps.catalog.permissions import IsOperator

from .availability import capacity_for, summarize_package
from .models import Booking, Discount, Payment
from .pricing import TWO_PLACES, apply_discount, calculate_total
from .serializers import (
    BookingSerializer,
    BookingUpdateSerializer,
    ConfirmationSerializer,
    DiscountSerializer,
    PaymentSerializer,
    QuoteRequestSerializer,
)
from .services import delete_booking, sync_payment_amount
from .submission import BookingSubmission, FailureReason

logger = logging.getLogger(__name__)

FAILURE_STATUS = {
    FailureReason.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureReason.CONFLICT: status.HTTP_409_CONFLICT,
    FailureReason.ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _form_data(request):
    data = request.data
    if hasattr(data, 'dict'):
        return data.dict()
    if isinstance(data, dict):
        return dict(data)
    return {}


class BookingViewSet(viewsets.ModelViewSet):
    """
    Bookings.
    - Anyone can submit a booking (create) or ask for a quote
    - Only operators and admins can list, view, edit, or delete bookings
    """
    queryset = Booking.objects.all()
    serializer_class = BookingSerializer

    def get_queryset(self):
        queryset = Booking.objects.select_related(
            'package__location', 'package_date', 'seat', 'discount', 'payment'
        )
        params = self.request.query_params

        package = params.get('package')
        if package and package.isdigit():
            queryset = queryset.filter(package_id=int(package))

        package_date = params.get('package_date')
        if package_date and package_date.isdigit():
            queryset = queryset.filter(package_date_id=int(package_date))

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                models.Q(name__icontains=search) |
                models.Q(email__icontains=search) |
                models.Q(confirmation_code__iexact=search)
            )
        return queryset

    def get_permissions(self):
        if self.action in ('create', 'quote'):
            return [AllowAny()]
        return [IsOperator()]

    def get_serializer_class(self):
        if self.action in ('update', 'partial_update'):
            return BookingUpdateSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):
        submission = BookingSubmission()
        if submission.submit(_form_data(request)):
            serializer = BookingSerializer(submission.booking, context=self.get_serializer_context())
            return Response(serializer.data, status=status.HTTP_201_CREATED)

        body = {'errors': submission.errors}
        if submission.error_message:
            body['error'] = submission.error_message
        return Response(body, status=FAILURE_STATUS[submission.failure_reason])

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = BookingUpdateSerializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        sync_payment_amount(booking)
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):
        delete_booking(instance)

    @action(detail=False, methods=['post'])
    def quote(self, request):
        """Price and remaining places for the current form inputs."""
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        package = data['package']
        package_date = data.get('package_date')

        discount = None
        code = (data.get('discount_code') or '').strip()
        if code:
            discount = Discount.objects.filter(code__iexact=code).first()
            if discount is None or not discount.is_valid():
                return Response(
                    {'errors': {'discount_code': 'Discount code is invalid or expired'}},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        subtotal = calculate_total(package.effective_price, data['adults'], data['children'], data['seat_selected'])
        total = apply_discount(subtotal, discount)
        availability = capacity_for(package, package_date, package.bookings.all())
        travelers = data['adults'] + data['children']

        return Response({
            'package': package.pk,
            'package_date': package_date.pk if package_date else None,
            'unit_price': str(package.effective_price),
            'subtotal': str(subtotal),
            'discount': str(subtotal - total),
            'total_price': str(total),
            'currency': settings.CURRENCY_CODE,
            'availability': availability.as_dict() if availability else None,
            'fits': availability.fits(travelers) if availability else None,
        })


class ConfirmationView(generics.RetrieveAPIView):
    """Public booking confirmation looked up by its code."""
    queryset = Booking.objects.select_related('package__location', 'seat', 'payment')
    serializer_class = ConfirmationSerializer
    permission_classes = [AllowAny]
    lookup_field = 'confirmation_code'

    def get_object(self):
        self.kwargs['confirmation_code'] = self.kwargs['confirmation_code'].upper()
        return super().get_object()


class PaymentViewSet(viewsets.ModelViewSet):
    serializer_class = PaymentSerializer
    permission_classes = [IsOperator]

    def get_queryset(self):
        queryset = Payment.objects.select_related('booking')
        booking = self.request.query_params.get('booking')
        if booking and booking.isdigit():
            queryset = queryset.filter(booking_id=int(booking))
        payment_status = self.request.query_params.get('status')
        if payment_status:
            queryset = queryset.filter(status=payment_status)
        return queryset

    def perform_update(self, serializer):
        payment = serializer.save()
        logger.info("Payment %s for booking %s is now %s", payment.pk, payment.booking_id, payment.status)


class DiscountViewSet(viewsets.ModelViewSet):
    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    permission_classes = [IsOperator]


class DashboardView(APIView):
    permission_classes = [IsOperator]

    def get(self, request):
        packages = Package.objects.prefetch_related('dates', 'bookings')
        revenue = Booking.objects.aggregate(total=models.Sum('total_price'))['total'] or Decimal('0')
        payments = dict(
            Payment.objects.values_list('status').annotate(count=models.Count('id')).order_by()
        )

        data = {
            'totals': {
                'packages': packages.count(),
                'bookings': Booking.objects.count(),
                'revenue': str(Decimal(revenue).quantize(TWO_PLACES)),
                'currency': settings.CURRENCY_CODE,
            },
            'payments': {key: payments.get(key, 0) for key, _ in Payment.STATUS_CHOICES},
            'packages': [
                {
                    'id': package.pk,
                    'title': package.title,
                    'availability': summarize_package(package).as_dict(),
                }
                for package in packages
            ],
        }
        return Response(data)
