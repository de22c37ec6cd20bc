"""
URL configuration for agency_backend project.
"""
from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenRefreshView,
    TokenVerifyView,
)
from apps.accounts.views import CustomTokenObtainPairView
from apps.bookings.views import (
    BookingViewSet,
    ConfirmationView,
    DashboardView,
    DiscountViewSet,
    PaymentViewSet,
)
from apps.catalog.views import (
    BusViewSet,
    CategoryViewSet,
    CompanyViewSet,
    GalleryImageViewSet,
    LocationViewSet,
    PackageViewSet,
    SeatViewSet,
)

# Create a router and register viewsets
router = DefaultRouter()
router.register(r'packages', PackageViewSet, basename='package')
router.register(r'locations', LocationViewSet, basename='location')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'companies', CompanyViewSet, basename='company')
router.register(r'gallery-images', GalleryImageViewSet, basename='gallery-image')
router.register(r'buses', BusViewSet, basename='bus')
router.register(r'seats', SeatViewSet, basename='seat')
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'payments', PaymentViewSet, basename='payment')
router.register(r'discounts', DiscountViewSet, basename='discount')

urlpatterns = [
    path('admin/', admin.site.urls),
    # JWT Token endpoints
    path('api/token/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/token/verify/', TokenVerifyView.as_view(), name='token_verify'),
    # Authentication endpoints
    path('api/auth/', include('apps.accounts.urls')),
    # Customer confirmation page and operator dashboard
    path('api/confirmations/<str:confirmation_code>/', ConfirmationView.as_view(), name='booking-confirmation'),
    path('api/dashboard/', DashboardView.as_view(), name='dashboard'),
    # API routes
    path('api/', include(router.urls)),
]
