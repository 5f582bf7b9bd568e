import uuid
from django.conf import settings
import django.core.serializers.json
from django.db import migrations, models
import django.db.models.deletion


PAYMENT_METHOD_CHOICES = [
    ('bank_transfer', 'Bank transfer'),
    ('paypal', 'PayPal'),
    ('lydia', 'Lydia'),
    ('cash', 'Cash'),
    ('paylib', 'Paylib'),
    ('revolut', 'Revolut'),
]


class Migration(migrations.Migration):

    dependencies = [
        ('teams', '0002_activitylog_metadata_encoder'),
        ('fines', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='fine',
            name='last_reminder_sent',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AlterField(
            model_name='payment',
            name='method',
            field=models.CharField(blank=True, choices=PAYMENT_METHOD_CHOICES, max_length=50),
        ),
        migrations.CreateModel(
            name='TeamPaymentMethod',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('method_type', models.CharField(choices=PAYMENT_METHOD_CHOICES, max_length=20)),
                ('is_enabled', models.BooleanField(default=True)),
                ('display_name', models.CharField(blank=True, max_length=100)),
                ('instructions', models.TextField(blank=True)),
                ('config', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payment_methods_created', to=settings.AUTH_USER_MODEL)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payment_methods', to='teams.team')),
            ],
            options={
                'db_table': 'team_payment_methods',
                'ordering': ['method_type'],
            },
        ),
        migrations.AddConstraint(
            model_name='teampaymentmethod',
            constraint=models.UniqueConstraint(fields=('team', 'method_type'), name='team_payment_methods_unique_type'),
        ),
    ]
