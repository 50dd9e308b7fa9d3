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
			name='Webhook',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('url', models.URLField(max_length=1000)),
				('secret', models.CharField(blank=True, default='', help_text='Signs each delivery (X-Signature)', max_length=255)),
				('enabled', models.BooleanField(default=True)),
				('retry_count', models.PositiveSmallIntegerField(default=3)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				('domain', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='webhook', to='domains.domain')),
			],
		),
		migrations.CreateModel(
			name='WebhookDeliveryLog',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('status', models.CharField(choices=[('success', 'Success'), ('error', 'Error')], max_length=10)),
				('status_code', models.PositiveSmallIntegerField(blank=True, null=True)),
				('attempt', models.PositiveSmallIntegerField(default=1)),
				('is_test', models.BooleanField(default=False)),
				('error_message', models.TextField(blank=True, null=True)),
				('request_payload', models.JSONField(default=dict)),
				('response_body', models.TextField(blank=True, null=True)),
				('created_at', models.DateTimeField(default=django.utils.timezone.now)),
				('webhook', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_logs', to='webhooks.webhook')),
			],
			options={
				'ordering': ['-created_at', '-id'],
				'indexes': [models.Index(fields=['webhook', '-created_at'], name='webhooks_we_webhook_3c1f0e_idx')],
			},
		),
	]
