from django.db import models
from django.db.models.functions import Coalesce
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.bookings.availability import summarize_package

from .models import Bus, Category, Company, GalleryImage, Location, Package, Seat
from .permissions import IsOperatorOrReadOnly
from .serializers import (
    BusSerializer,
    CategorySerializer,
    CompanySerializer,
    GalleryImageSerializer,
    LocationSerializer,
    PackageDateSerializer,
    PackageDatesReplaceSerializer,
    PackageSerializer,
    SeatSerializer,
)
from .services import DatesInUseError, replace_package_dates


def _is_true(value):
    return value is not None and value.lower() in ('true', '1')


class ProtectedDestroyMixin:
    """Answer 409 instead of a server error when other rows still point at the instance."""

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except models.ProtectedError:
            return Response(
                {'error': f'{instance} is still referenced and cannot be deleted'},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class PackageViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    """
    Travel packages with their gallery, date occurrences and availability.
    - Everyone can read the catalog
    - Only operators and admins can create, update, or delete
    """
    queryset = Package.objects.all()
    serializer_class = PackageSerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        queryset = Package.objects.select_related('location', 'category', 'company').prefetch_related(
            'gallery', 'dates', 'bookings'
        )
        params = self.request.query_params

        category = params.get('category')
        if category:
            if category.isdigit():
                queryset = queryset.filter(category_id=int(category))
            else:
                queryset = queryset.filter(category__name__iexact=category)

        destination = params.get('destination')
        if destination:
            queryset = queryset.filter(
                models.Q(location__name__icontains=destination) |
                models.Q(location__country__icontains=destination)
            )

        duration = params.get('duration')
        if duration:
            queryset = queryset.filter(duration__icontains=duration)

        company = params.get('company')
        if company and company.isdigit():
            queryset = queryset.filter(company_id=int(company))

        popular = params.get('popular')
        if popular is not None:
            queryset = queryset.filter(popular=_is_true(popular))

        by_bus = params.get('by_bus')
        if by_bus is not None:
            queryset = queryset.filter(by_bus=_is_true(by_bus))

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                models.Q(title__icontains=search) |
                models.Q(description__icontains=search)
            )

        # Price range applies to what the customer pays
        min_price = params.get('min_price')
        max_price = params.get('max_price')
        if min_price or max_price:
            queryset = queryset.annotate(current_price=Coalesce('sale_price', 'price'))
        if min_price:
            try:
                queryset = queryset.filter(current_price__gte=float(min_price))
            except (ValueError, TypeError):
                pass  # Ignore invalid min_price
        if max_price:
            try:
                queryset = queryset.filter(current_price__lte=float(max_price))
            except (ValueError, TypeError):
                pass  # Ignore invalid max_price

        return queryset

    @action(detail=True, methods=['get', 'put', 'post'])
    def dates(self, request, pk=None):
        package = self.get_object()
        if request.method == 'GET':
            serializer = PackageDateSerializer(package.dates.all(), many=True)
            return Response(serializer.data)

        serializer = PackageDatesReplaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            created = replace_package_dates(package, serializer.validated_data['dates'])
        except DatesInUseError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(PackageDateSerializer(created, many=True).data)

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        package = self.get_object()
        return Response(summarize_package(package).as_dict())


class LocationViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    serializer_class = LocationSerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        return Location.objects.annotate(package_count=models.Count('packages'))


class CategoryViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    serializer_class = CategorySerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        return Category.objects.annotate(package_count=models.Count('packages'))


class CompanyViewSet(viewsets.ModelViewSet):
    queryset = Company.objects.all()
    serializer_class = CompanySerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None


class GalleryImageViewSet(viewsets.ModelViewSet):
    """
    Gallery images are listed per package: ``?package=<id>`` is required.
    """
    serializer_class = GalleryImageSerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        queryset = GalleryImage.objects.all()
        package = self.request.query_params.get('package')
        if package:
            queryset = queryset.filter(package_id=package)
        return queryset

    def list(self, request, *args, **kwargs):
        package = request.query_params.get('package')
        if not package or not package.isdigit():
            return Response({'error': 'Package ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        return super().list(request, *args, **kwargs)


class BusViewSet(viewsets.ModelViewSet):
    serializer_class = BusSerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        queryset = Bus.objects.prefetch_related('seats__booking')
        package = self.request.query_params.get('package')
        if package and package.isdigit():
            queryset = queryset.filter(package_id=int(package))
        return queryset


class SeatViewSet(viewsets.ModelViewSet):
    serializer_class = SeatSerializer
    permission_classes = [IsOperatorOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        queryset = Seat.objects.select_related('bus', 'booking')
        bus = self.request.query_params.get('bus')
        if bus and bus.isdigit():
            queryset = queryset.filter(bus_id=int(bus))
        return queryset
