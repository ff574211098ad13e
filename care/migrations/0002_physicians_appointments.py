import uuid

import care.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('care', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='medication',
            name='usage_times',
            field=models.JSONField(blank=True, default=list, null=True, validators=[care.models.validate_usage_times]),
        ),
        migrations.CreateModel(
            name='Specialization',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128, unique=True)),
                ('description', models.TextField(blank=True)),
            ],
        ),
        migrations.CreateModel(
            name='Physician',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('clinical_address', models.CharField(max_length=255)),
                ('session_price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('available_times', models.JSONField(blank=True, default=list)),
                ('specialization', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='physicians', to='care.specialization')),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='physician', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('appointment_date', models.DateField()),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('meeting_address', models.CharField(max_length=255)),
                ('physician_notes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('canceled', 'Canceled'), ('completed', 'Completed')], default='pending', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='care.patient')),
                ('physician', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='care.physician')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['physician', 'appointment_date'], name='care_appt_physician_idx'),
                    models.Index(fields=['patient', 'appointment_date'], name='care_appt_patient_idx'),
                ],
            },
        ),
    ]
