import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='TestSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('mcq_count', models.PositiveIntegerField(default=10)),
                ('coding_count', models.PositiveIntegerField(default=2)),
                ('mcq_time_limit', models.PositiveIntegerField(default=30, help_text='Minutes')),
                ('coding_time_limit', models.PositiveIntegerField(default=45, help_text='Minutes')),
                ('passing_percentage', models.PositiveIntegerField(default=70, validators=[django.core.validators.MaxValueValidator(100)])),
                ('round1_passing_percentage', models.PositiveIntegerField(default=60, validators=[django.core.validators.MaxValueValidator(100)])),
                ('max_violations', models.PositiveIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1)])),
                ('violation_penalty_percent', models.PositiveIntegerField(default=5, validators=[django.core.validators.MaxValueValidator(100)])),
                ('auto_submit_on_violation', models.BooleanField(default=True)),
                ('require_fullscreen', models.BooleanField(default=True)),
                ('max_leave_days', models.PositiveIntegerField(default=7, validators=[django.core.validators.MinValueValidator(1)])),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'test settings',
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('SETTINGS', 'Settings Changed'), ('PROVISION', 'Test Provisioned'), ('SUBMIT', 'Test Submitted'), ('DECISION', 'Leave Decided'), ('QUESTION', 'Question Bank Changed')], max_length=20)),
                ('target_model', models.CharField(help_text='e.g., LeaveRequest, TestSession, TestSettings', max_length=50)),
                ('target_object_id', models.CharField(blank=True, max_length=100, null=True)),
                ('details', models.TextField(blank=True, help_text='Description of changes')),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp'],
            },
        ),
    ]
