from django.contrib import admin
from django.urls import path, include

from users.views import AdminStatsView

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & Profile ---
    path('api/', include('users.urls')),

    # --- Admin Dashboard Stats ---
    path('api/admin/stats/', AdminStatsView.as_view(), name='admin-stats'),

    # --- Policy Settings & Audit Trail ---
    path('api/', include('cores.urls')),

    # --- Question Bank ---
    path('api/', include('questions.urls')),

    # --- Leave Workflow ---
    path('api/', include('leaves.urls')),

    # --- Proctored Test Sessions ---
    path('api/tests/', include('assessments.urls')),
]
