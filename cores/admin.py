from django.contrib import admin

from .models import TestSettings, AuditLog

admin.site.register(TestSettings)
admin.site.register(AuditLog)
