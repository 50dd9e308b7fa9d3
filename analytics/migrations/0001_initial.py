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
			name='ScriptActivity',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('action', models.CharField(choices=[('view', 'View'), ('accept', 'Accept'), ('reject', 'Reject'), ('partial', 'Partial'), ('ping', 'Ping')], max_length=20)),
				('page_domain', models.CharField(blank=True, default='', max_length=255)),
				('url', models.TextField(blank=True, default='')),
				('visitor_id', models.CharField(blank=True, default='', max_length=120)),
				('session_id', models.CharField(blank=True, default='', max_length=120)),
				('user_agent', models.TextField(blank=True, default='')),
				('language', models.CharField(blank=True, default='', max_length=35)),
				('reported_at', models.DateTimeField(blank=True, null=True)),
				('created_at', models.DateTimeField(default=django.utils.timezone.now)),
				('domain', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity', to='domains.domain')),
			],
			options={
				'ordering': ['-created_at'],
				'indexes': [models.Index(fields=['domain', 'created_at'], name='analytics_s_domain__8e2b4a_idx')],
			},
		),
	]
