from django.db import transaction
from django.utils.dateparse import parse_datetime
from rest_framework import serializers

from apps.bookings.availability import calendar_day, summarize_package

from .constants import MAX_SEATS_PER_BUS
from .models import Bus, Category, Company, GalleryImage, Location, Package, PackageDate, Seat


class LocationSerializer(serializers.ModelSerializer):
    package_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Location
        fields = ('id', 'name', 'country', 'package_count')


class CategorySerializer(serializers.ModelSerializer):
    package_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ('id', 'name', 'package_count')


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = '__all__'
        read_only_fields = ('created_at',)


class GalleryImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = GalleryImage
        fields = ('id', 'package', 'url')


class CalendarDateField(serializers.DateField):
    """Date field that also takes an ISO datetime and keeps its local calendar day."""

    def to_internal_value(self, value):
        if isinstance(value, str) and 'T' in value:
            try:
                parsed = parse_datetime(value.strip())
            except ValueError:
                parsed = None
            if parsed is not None:
                return calendar_day(parsed)
        return super().to_internal_value(value)


class PackageDateSerializer(serializers.ModelSerializer):
    start_date = CalendarDateField()
    end_date = CalendarDateField()
    max_people = serializers.IntegerField(min_value=1, required=False, default=1)

    class Meta:
        model = PackageDate
        fields = ('id', 'package', 'start_date', 'end_date', 'max_people')
        read_only_fields = ('package',)

    def validate(self, attrs):
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the start date.'})
        return attrs


class PackageDatesReplaceSerializer(serializers.Serializer):
    dates = PackageDateSerializer(many=True, error_messages={'not_a_list': 'Dates must be an array'})


class SeatSerializer(serializers.ModelSerializer):
    is_taken = serializers.BooleanField(read_only=True)

    class Meta:
        model = Seat
        fields = ('id', 'bus', 'number', 'is_taken')


class BusSerializer(serializers.ModelSerializer):
    seat_count = serializers.IntegerField(min_value=1, max_value=MAX_SEATS_PER_BUS)
    seats = SeatSerializer(many=True, read_only=True)

    class Meta:
        model = Bus
        fields = ('id', 'name', 'seat_count', 'package', 'seats')

    @transaction.atomic
    def create(self, validated_data):
        bus = super().create(validated_data)
        Seat.objects.bulk_create(
            Seat(bus=bus, number=str(number)) for number in range(1, bus.seat_count + 1)
        )
        return bus

    @transaction.atomic
    def update(self, instance, validated_data):
        new_count = validated_data.get('seat_count', instance.seat_count)
        extra = [
            seat for seat in instance.seats.all()
            if seat.number.isdigit() and int(seat.number) > new_count
        ]
        if any(seat.is_taken for seat in extra):
            raise serializers.ValidationError({'seat_count': 'Seats above the new count are already booked.'})

        bus = super().update(instance, validated_data)
        Seat.objects.filter(pk__in=[seat.pk for seat in extra]).delete()
        existing = set(bus.seats.values_list('number', flat=True))
        Seat.objects.bulk_create(
            Seat(bus=bus, number=str(number))
            for number in range(1, new_count + 1)
            if str(number) not in existing
        )
        return bus


class PackageSerializer(serializers.ModelSerializer):
    location = LocationSerializer(read_only=True)
    location_id = serializers.PrimaryKeyRelatedField(
        source='location', queryset=Location.objects.all(), write_only=True
    )
    category = CategorySerializer(read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        source='category', queryset=Category.objects.all(), write_only=True
    )
    company = CompanySerializer(read_only=True)
    company_id = serializers.PrimaryKeyRelatedField(
        source='company',
        queryset=Company.objects.all(),
        write_only=True,
        required=False,
        allow_null=True,
    )
    effective_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    gallery = GalleryImageSerializer(many=True, read_only=True)
    dates = PackageDateSerializer(many=True, read_only=True)
    availability = serializers.SerializerMethodField()

    class Meta:
        model = Package
        fields = (
            'id',
            'title',
            'description',
            'price',
            'sale_price',
            'effective_price',
            'duration',
            'start_date',
            'end_date',
            'max_people',
            'popular',
            'by_bus',
            'location',
            'location_id',
            'category',
            'category_id',
            'company',
            'company_id',
            'gallery',
            'dates',
            'availability',
            'created_at',
            'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be positive')
        return value

    def validate_max_people(self, value):
        if value <= 0:
            raise serializers.ValidationError('Max people must be positive')
        return value

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the start date.'})
        return attrs

    def get_availability(self, obj):
        return summarize_package(obj, bookings=obj.bookings.all(), dates=obj.dates.all()).as_dict()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if user is not None and getattr(user, 'is_authenticated', False) and user.can_manage_catalog():
            data['bookings'] = [
                {
                    'id': booking.id,
                    'name': booking.name,
                    'adults': booking.adults,
                    'children': booking.children,
                    'package_date': booking.package_date_id,
                    'start_date': booking.start_date,
                    'end_date': booking.end_date,
                    'total_price': booking.total_price,
                }
                for booking in instance.bookings.all()
            ]
        return data
