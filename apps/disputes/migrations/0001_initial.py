# Generated manually for the fine pot disputes app

import uuid
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('fines', '0001_initial'),
        ('teams', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FineDispute',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reason', models.TextField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('auto_approved', 'Approved by vote')], default='pending', max_length=20)),
                ('votes_count', models.PositiveIntegerField(default=0)),
                ('votes_required', models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('resolution_note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('disputed_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='disputes_filed', to=settings.AUTH_USER_MODEL)),
                ('fine', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disputes', to='fines.fine')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='disputes_resolved', to=settings.AUTH_USER_MODEL)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='disputes', to='teams.team')),
            ],
            options={
                'db_table': 'fine_disputes',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['team', 'status'], name='disputes_team_status_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'pending')), fields=('fine',), name='disputes_one_pending_per_fine')],
            },
        ),
        migrations.CreateModel(
            name='FineDisputeVote',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('vote', models.BooleanField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('dispute', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='votes', to='disputes.finedispute')),
                ('voter', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='dispute_votes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'fine_dispute_votes',
                'ordering': ['created_at'],
                'constraints': [models.UniqueConstraint(fields=('dispute', 'voter'), name='dispute_votes_one_per_voter')],
            },
        ),
    ]
