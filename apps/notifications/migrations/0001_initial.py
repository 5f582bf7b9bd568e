# Generated manually for the fine pot notifications app

import uuid
import django.core.serializers.json
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

NOTIFICATION_TYPES = [
    ('fine_received', 'Fine received'),
    ('fine_paid', 'Fine paid'),
    ('payment_recorded', 'Payment recorded'),
    ('member_joined', 'Member joined'),
    ('member_left', 'Member left'),
    ('team_closed', 'Team closed'),
    ('team_reopened', 'Team reopened'),
    ('reminder_unpaid', 'Unpaid fine reminder'),
    ('dispute_created', 'Dispute filed'),
    ('dispute_resolved', 'Dispute resolved'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('teams', '0002_activitylog_metadata_encoder'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('notification_type', models.CharField(choices=NOTIFICATION_TYPES, max_length=30)),
                ('title', models.CharField(max_length=200)),
                ('body', models.TextField()),
                ('data', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='teams.team')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'is_read'], name='notifications_user_read_idx'),
                    models.Index(fields=['user', 'created_at'], name='notifications_user_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TeamNotificationSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('notifications_enabled', models.BooleanField(default=True)),
                ('notify_fine_received', models.BooleanField(default=True)),
                ('notify_fine_paid', models.BooleanField(default=True)),
                ('notify_payment_recorded', models.BooleanField(default=True)),
                ('notify_member_joined', models.BooleanField(default=True)),
                ('notify_member_left', models.BooleanField(default=True)),
                ('notify_team_closed', models.BooleanField(default=True)),
                ('notify_team_reopened', models.BooleanField(default=True)),
                ('notify_reminder_unpaid', models.BooleanField(default=True)),
                ('notify_dispute_created', models.BooleanField(default=True)),
                ('notify_dispute_resolved', models.BooleanField(default=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notification_settings', to='teams.team')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='team_notification_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'team_notification_settings',
                'unique_together': {('user', 'team')},
            },
        ),
    ]
