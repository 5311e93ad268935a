import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Leave',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(db_index=True, help_text='Identifier of the person on leave', max_length=255)),
                ('start_date', models.DateField(help_text='The first day of leave.')),
                ('end_date', models.DateField(help_text='The last day of leave.')),
                ('leave_type', models.CharField(choices=[('ANNUAL_LEAVE', 'Annual Leave'), ('OPTIONAL_HOLIDAY', 'Optional Holiday')], max_length=50)),
                ('status', models.CharField(choices=[('REQUESTED', 'Requested'), ('APPROVED', 'Approved'), ('CANCELLED', 'Cancelled')], max_length=50)),
                ('duration_type', models.CharField(choices=[('FULL_DAY', 'Full Day'), ('FIRST_HALF', 'First Half'), ('SECOND_HALF', 'Second Half')], default='FULL_DAY', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Leave',
                'verbose_name_plural': 'Leaves',
                'ordering': ['-start_date'],
            },
        ),
        migrations.CreateModel(
            name='OriginReference',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('origin_kind', models.CharField(choices=[('WEB', 'Web'), ('SLACK', 'Slack'), ('CALENDAR', 'Calendar'), ('KIMAI', 'Kimai')], max_length=50)),
                ('origin_id', models.CharField(help_text='ID of the leave in the origin system', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('leave', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='origin_references', to='leaves.leave')),
            ],
            options={
                'verbose_name': 'Origin Reference',
                'verbose_name_plural': 'Origin References',
            },
        ),
        migrations.AddIndex(
            model_name='leave',
            index=models.Index(fields=['user_id', 'start_date', 'end_date'], name='idx_leave_user_dates'),
        ),
        migrations.AddIndex(
            model_name='leave',
            index=models.Index(fields=['status'], name='idx_leave_status'),
        ),
        migrations.AddConstraint(
            model_name='originreference',
            constraint=models.UniqueConstraint(fields=('origin_kind', 'origin_id'), name='uk_origin_reference_kind_id'),
        ),
    ]
