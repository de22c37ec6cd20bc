from django.urls import path
from .views import register, profile, CustomTokenObtainPairView, me

urlpatterns = [
    path('register/', register, name='register'),
    path('login/', CustomTokenObtainPairView.as_view(), name='login'),
    path('profile/', profile, name='profile'),
    path('me/', me, name='me'),
]
