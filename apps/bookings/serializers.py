from django.conf import settings
from rest_framework import serializers

from apps.catalog.models import Package, PackageDate, Seat

from .models import Booking, Discount, Payment
from .validation import CANDIDATE_FIELDS, validate_booking


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ('id', 'booking', 'amount', 'status', 'created_at', 'updated_at')
        read_only_fields = ('created_at', 'updated_at')

    def validate_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount cannot be negative')
        return value


class BookingPackageSerializer(serializers.ModelSerializer):
    """Short package summary shown next to a booking."""
    location = serializers.StringRelatedField()

    class Meta:
        model = Package
        fields = ('id', 'title', 'location', 'duration', 'by_bus', 'price', 'sale_price')


class BookingSerializer(serializers.ModelSerializer):
    package = BookingPackageSerializer(read_only=True)
    payment = PaymentSerializer(read_only=True)
    seat_number = serializers.CharField(source='seat.number', read_only=True, default=None)
    discount_code = serializers.CharField(source='discount.code', read_only=True, default=None)

    class Meta:
        model = Booking
        fields = (
            'id',
            'confirmation_code',
            'package',
            'package_date',
            'name',
            'email',
            'phone',
            'id_number',
            'adults',
            'children',
            'start_date',
            'end_date',
            'total_price',
            'seat',
            'seat_number',
            'seat_selected',
            'discount_code',
            'payment',
            'created_at',
        )
        read_only_fields = fields


class BookingUpdateSerializer(serializers.ModelSerializer):
    """Operator edits to an existing booking."""
    package_date = serializers.PrimaryKeyRelatedField(
        queryset=PackageDate.objects.all(), required=False, allow_null=True
    )
    seat = serializers.PrimaryKeyRelatedField(queryset=Seat.objects.all(), required=False, allow_null=True)

    class Meta:
        model = Booking
        fields = (
            'package_date',
            'name',
            'email',
            'phone',
            'id_number',
            'adults',
            'children',
            'start_date',
            'end_date',
            'total_price',
            'seat',
            'seat_selected',
        )

    def validate(self, attrs):
        package_date = attrs.get('package_date', self.instance.package_date)
        if package_date is not None and package_date.package_id != self.instance.package_id:
            raise serializers.ValidationError({'package_date': 'Selected date does not belong to this package'})

        seat = attrs.get('seat')
        if seat is not None and seat.pk != self.instance.seat_id:
            if Booking.objects.filter(seat=seat).exclude(pk=self.instance.pk).exists():
                raise serializers.ValidationError({'seat': f'Seat {seat.number} is already taken'})

        candidate = {name: getattr(self.instance, name) for name in CANDIDATE_FIELDS}
        candidate.update({name: value for name, value in attrs.items() if name in CANDIDATE_FIELDS})
        others = self.instance.package.bookings.exclude(pk=self.instance.pk)
        result = validate_booking(candidate, self.instance.package, package_date, others)
        if not result.success:
            raise serializers.ValidationError(result.errors)

        for name in CANDIDATE_FIELDS:
            if name in attrs:
                attrs[name] = result.data[name]
        return attrs


class DiscountSerializer(serializers.ModelSerializer):
    is_valid = serializers.SerializerMethodField()

    class Meta:
        model = Discount
        fields = ('id', 'code', 'amount', 'expires_at', 'is_active', 'is_valid', 'created_at')
        read_only_fields = ('created_at',)

    def get_is_valid(self, obj):
        return obj.is_valid()

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be positive')
        return value


class QuoteRequestSerializer(serializers.Serializer):
    package = serializers.PrimaryKeyRelatedField(queryset=Package.objects.all())
    package_date = serializers.PrimaryKeyRelatedField(
        queryset=PackageDate.objects.all(), required=False, allow_null=True
    )
    adults = serializers.IntegerField(min_value=1, max_value=settings.BOOKING_MAX_ADULTS, default=1)
    children = serializers.IntegerField(min_value=0, max_value=settings.BOOKING_MAX_CHILDREN, default=0)
    seat_selected = serializers.BooleanField(default=False)
    discount_code = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        package_date = attrs.get('package_date')
        if package_date is not None and package_date.package_id != attrs['package'].pk:
            raise serializers.ValidationError({'package_date': 'Selected date does not belong to this package'})
        return attrs


class ConfirmationSerializer(serializers.ModelSerializer):
    """What a customer sees on the confirmation page."""
    package = BookingPackageSerializer(read_only=True)
    payment_status = serializers.CharField(source='payment.status', read_only=True, default=None)
    seat_number = serializers.CharField(source='seat.number', read_only=True, default=None)

    class Meta:
        model = Booking
        fields = (
            'confirmation_code',
            'package',
            'name',
            'adults',
            'children',
            'start_date',
            'end_date',
            'total_price',
            'seat_number',
            'payment_status',
            'created_at',
        )
        read_only_fields = fields
