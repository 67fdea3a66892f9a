# Initial schema for Telegram account links and leave requests

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
            name='TelegramUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('telegram_user_id', models.BigIntegerField(unique=True)),
                ('email', models.EmailField(max_length=254)),
                ('telegram_username', models.CharField(blank=True, max_length=150, null=True)),
                ('telegram_first_name', models.CharField(blank=True, max_length=150, null=True)),
                ('telegram_last_name', models.CharField(blank=True, max_length=150, null=True)),
                ('chat_id', models.BigIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='telegram_accounts',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
        migrations.CreateModel(
            name='LeaveRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('leave_type', models.CharField(
                    choices=[
                        ('Personal Leave', 'Personal Leave'),
                        ('Sick Leave', 'Sick Leave'),
                        ('Vacation Leave', 'Vacation Leave'),
                    ],
                    default='Personal Leave',
                    max_length=20,
                )),
                ('selected_dates', models.JSONField(default=list)),
                ('days', models.PositiveIntegerField(default=1)),
                ('reason', models.TextField(blank=True)),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')],
                    default='pending',
                    max_length=10,
                )),
                ('is_half_day', models.BooleanField(default=False)),
                ('half_day_period', models.CharField(
                    blank=True,
                    choices=[('morning', 'Morning'), ('afternoon', 'Afternoon')],
                    max_length=10,
                    null=True,
                )),
                ('submitted_at', models.DateTimeField(auto_now_add=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('approved_by_name', models.CharField(blank=True, max_length=150, null=True)),
                ('approved_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='approved_leave_requests',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='leave_requests',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'ordering': ['-submitted_at'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('is_half_day', False), ('half_day_period__isnull', False), _connector='OR'),
                        name='half_day_requires_period',
                    ),
                ],
            },
        ),
    ]
