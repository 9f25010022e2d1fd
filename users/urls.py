from django.urls import path
from .views import RegisterView, CustomLoginView, UserProfileView

urlpatterns = [
    path('auth/register/', RegisterView.as_view(), name='register'),
    path('auth/login/', CustomLoginView.as_view(), name='login'),
    path('auth/me/', UserProfileView.as_view(), name='user-profile'),
]
