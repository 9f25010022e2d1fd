import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('leaves', '0001_initial'),
        ('questions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TestSession',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('state', models.CharField(choices=[('not-started', 'Not Started'), ('in-progress', 'In Progress'), ('submitted', 'Submitted')], default='not-started', max_length=20)),
                ('submit_reason', models.CharField(blank=True, choices=[('manual', 'Manual'), ('timeout', 'Timeout'), ('violation-limit', 'Violation Limit')], max_length=20)),
                ('time_limit', models.PositiveIntegerField(help_text='Minutes')),
                ('policy_snapshot', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('round1_score', models.FloatField(blank=True, null=True)),
                ('round2_score', models.FloatField(blank=True, null=True)),
                ('raw_score', models.FloatField(blank=True, null=True)),
                ('points_earned', models.FloatField(blank=True, null=True)),
                ('max_score', models.PositiveIntegerField(default=0)),
                ('violation_count', models.PositiveIntegerField(default=0)),
                ('violation_penalty', models.FloatField(default=0)),
                ('final_score', models.FloatField(blank=True, null=True)),
                ('test_result', models.CharField(blank=True, choices=[('pass', 'Pass'), ('fail', 'Fail')], max_length=10)),
                ('leave', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='test_sessions', to='leaves.leaverequest')),
            ],
        ),
        migrations.AddConstraint(
            model_name='testsession',
            constraint=models.UniqueConstraint(condition=models.Q(('state', 'submitted'), _negated=True), fields=('leave',), name='one_active_session_per_leave'),
        ),
        migrations.CreateModel(
            name='SessionQuestion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('round', models.CharField(choices=[('round1', 'Round 1 (MCQ)'), ('round2', 'Round 2 (Coding)')], max_length=10)),
                ('position', models.PositiveIntegerField()),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='session_items', to='questions.question')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='assessments.testsession')),
            ],
            options={
                'ordering': ['position'],
                'unique_together': {('session', 'question')},
            },
        ),
        migrations.CreateModel(
            name='Answer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.JSONField(null=True)),
                ('language', models.CharField(blank=True, max_length=30)),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_correct', models.BooleanField(null=True)),
                ('cases_passed', models.PositiveIntegerField(default=0)),
                ('cases_total', models.PositiveIntegerField(default=0)),
                ('awarded_points', models.FloatField(default=0)),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='questions.question')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='assessments.testsession')),
            ],
            options={
                'ordering': ['submitted_at', 'id'],
                'unique_together': {('session', 'question')},
            },
        ),
        migrations.CreateModel(
            name='ViolationRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('violation_type', models.CharField(max_length=50)),
                ('detail', models.TextField(blank=True)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='violations', to='assessments.testsession')),
            ],
            options={
                'ordering': ['timestamp', 'id'],
            },
        ),
    ]
