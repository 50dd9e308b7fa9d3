import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		('domains', '0001_initial'),
	]

	operations = [
		migrations.CreateModel(
			name='ConsentLog',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('consent_id', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
				('choice', models.CharField(choices=[('accept', 'Accept'), ('reject', 'Reject'), ('partial', 'Partial')], max_length=20)),
				('categories', models.JSONField(default=dict)),
				('session_id', models.CharField(blank=True, default='', max_length=120)),
				('user_id', models.CharField(blank=True, default='', max_length=120)),
				('truncated_ip', models.GenericIPAddressField(blank=True, null=True)),
				('user_agent', models.TextField(blank=True, null=True)),
				('created_at', models.DateTimeField(default=django.utils.timezone.now)),
				('domain', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='consent_logs', to='domains.domain')),
			],
			options={
				'ordering': ['-created_at'],
			},
		),
	]
