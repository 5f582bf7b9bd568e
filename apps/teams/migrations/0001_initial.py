# Generated manually for the fine pot teams app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import migrations, models
import django.db.models.deletion

import apps.teams.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=50)),
                ('description', models.TextField(blank=True)),
                ('sport', models.CharField(blank=True, max_length=50)),
                ('invite_code', models.CharField(default=apps.teams.models.generate_invite_code, editable=False, max_length=16, unique=True)),
                ('fine_permission', models.CharField(choices=[('admin_only', 'Admins only'), ('treasurer', 'Admins and treasurers'), ('everyone', 'Everyone')], default='everyone', max_length=20)),
                ('allow_custom_fines', models.BooleanField(default=True)),
                ('dispute_enabled', models.BooleanField(default=False)),
                ('dispute_mode', models.CharField(blank=True, choices=[('simple', 'Admin decision'), ('community', 'Community vote')], max_length=20, null=True)),
                ('dispute_votes_required', models.PositiveIntegerField(blank=True, null=True, validators=[MinValueValidator(1), MaxValueValidator(100)])),
                ('is_closed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='created_teams', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'teams',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['created_by', 'created_at'], name='teams_creator_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='TeamMembership',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('treasurer', 'Treasurer'), ('member', 'Member')], default='member', max_length=20)),
                ('credit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('is_deleted', models.BooleanField(default=False)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='teams.team')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='team_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'team_memberships',
                'ordering': ['joined_at'],
                'indexes': [
                    models.Index(fields=['team', 'role'], name='memberships_team_role_idx'),
                    models.Index(fields=['user', 'joined_at'], name='memberships_user_joined_idx'),
                ],
                'unique_together': {('team', 'user')},
            },
        ),
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('activity_type', models.CharField(choices=[('team_created', 'Team created'), ('member_joined', 'Member joined'), ('member_left', 'Member left'), ('rule_created', 'Rule created'), ('rule_updated', 'Rule updated'), ('fine_issued', 'Fine issued'), ('fine_deleted', 'Fine deleted'), ('payment_recorded', 'Payment recorded'), ('expense_recorded', 'Expense recorded'), ('dispute_created', 'Dispute created'), ('dispute_resolved', 'Dispute resolved')], max_length=30)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activities', to=settings.AUTH_USER_MODEL)),
                ('target_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='targeted_activities', to=settings.AUTH_USER_MODEL)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='teams.team')),
            ],
            options={
                'db_table': 'activity_log',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['team', 'created_at'], name='activity_team_created_idx')],
            },
        ),
    ]
