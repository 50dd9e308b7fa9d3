import uuid

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
			name='Domain',
			fields=[
				('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
				('url', models.URLField(max_length=500)),
				('embed_key', models.CharField(blank=True, default='', max_length=40, unique=True)),
				('is_active', models.BooleanField(default=True)),
				('secure_flags', models.BooleanField(default=True, help_text='Mark consent cookies Secure on https pages')),
				('language', models.CharField(default='en', max_length=10)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='domains', to=settings.AUTH_USER_MODEL)),
			],
		),
		migrations.CreateModel(
			name='ScriptDescriptor',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('category', models.CharField(choices=[('functional', 'Functional / Necessary'), ('analytics', 'Analytics'), ('advertising', 'Advertising'), ('social', 'Social')], max_length=20)),
				('script_id', models.CharField(help_text='Element id, unique per site (e.g. google-analytics-4)', max_length=120)),
				('name', models.CharField(blank=True, help_text='e.g., Google Analytics, Facebook Pixel', max_length=200)),
				('src', models.URLField(blank=True, default='', max_length=1000)),
				('content', models.TextField(blank=True, default='')),
				('is_async', models.BooleanField(default=True)),
				('attributes', models.JSONField(blank=True, default=dict)),
				('position', models.PositiveIntegerField(default=0)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('domain', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='script_descriptors', to='domains.domain')),
			],
			options={
				'ordering': ['category', 'position', 'id'],
				'unique_together': {('domain', 'script_id')},
			},
		),
	]
