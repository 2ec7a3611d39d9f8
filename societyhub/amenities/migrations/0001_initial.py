# Generated manually
import datetime
import django.db.models.deletion
import societyhub.core.utils
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('society', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Amenity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('type', models.CharField(choices=[('clubhouse', 'Clubhouse'), ('gym', 'Gym'), ('pool', 'Swimming Pool'), ('hall', 'Party Hall'), ('court', 'Sports Court'), ('garden', 'Garden'), ('other', 'Other')], default='other', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('capacity', models.PositiveIntegerField(default=0, help_text='Maximum guests per booking, 0 for no limit')),
                ('charges_per_hour', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('available_days', models.JSONField(blank=True, default=societyhub.core.utils.all_weekdays, help_text="Weekdays open for booking, e.g. ['Mon', 'Sat']")),
                ('open_time', models.TimeField(default=datetime.time(6, 0))),
                ('close_time', models.TimeField(default=datetime.time(22, 0))),
                ('status', models.CharField(choices=[('available', 'Available'), ('maintenance', 'Under Maintenance'), ('closed', 'Closed')], default='available', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('society', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='amenities', to='society.society')),
            ],
            options={
                'db_table': 'amenities',
                'ordering': ['name'],
                'verbose_name_plural': 'amenities',
            },
        ),
        migrations.CreateModel(
            name='AmenityBooking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('purpose', models.CharField(blank=True, max_length=200)),
                ('guests', models.PositiveIntegerField(default=1)),
                ('hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('CONFIRMED', 'Confirmed'), ('REJECTED', 'Rejected'), ('CANCELLED', 'Cancelled')], default='PENDING', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('amenity', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='amenities.amenity')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='amenity_bookings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'amenity_bookings',
                'ordering': ['-date', '-start_time'],
                'indexes': [
                    models.Index(fields=['amenity', 'date'], name='bookings_amenity_date_idx'),
                    models.Index(fields=['user', 'date'], name='bookings_user_date_idx'),
                ],
            },
        ),
    ]
