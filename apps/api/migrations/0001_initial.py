from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Account',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('plan', models.CharField(choices=[('Free', 'Free'), ('Personal', 'Personal'), ('Creator', 'Creator'), ('Business', 'Business')], default='Free', max_length=20)),
                ('monthly_redesign_limit', models.PositiveIntegerField(default=3)),
                ('redesigns_used', models.PositiveIntegerField(default=0)),
                ('period_start', models.DateTimeField(default=django.utils.timezone.now)),
                ('polar_customer_id', models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ('subscription_id', models.CharField(blank=True, max_length=100, null=True)),
                ('subscription_status', models.CharField(default='active', max_length=20)),
                ('current_period_end', models.DateTimeField(blank=True, null=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='account', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='WebhookEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_id', models.CharField(max_length=200, unique=True)),
                ('event_type', models.CharField(max_length=100)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('processed', models.BooleanField(default=False)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Redesign',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('original_image_url', models.URLField(max_length=500)),
                ('original_image_key', models.CharField(max_length=255)),
                ('redesigned_image_url', models.URLField(max_length=500)),
                ('redesigned_image_key', models.CharField(max_length=255)),
                ('design_catalog', models.JSONField(blank=True, default=dict)),
                ('styles', models.JSONField(default=list)),
                ('climate_zone', models.CharField(blank=True, default='', max_length=200)),
                ('is_pinned', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='redesigns', to='api.account')),
            ],
            options={
                'ordering': ['-is_pinned', '-created_at'],
                'indexes': [models.Index(fields=['account', 'is_pinned', 'created_at'], name='redesign_history_idx')],
            },
        ),
        migrations.CreateModel(
            name='RedesignJob',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('context_key', models.CharField(default='default', max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('source_image', models.BinaryField()),
                ('source_mime_type', models.CharField(max_length=50)),
                ('styles', models.JSONField(default=list)),
                ('allow_structural_changes', models.BooleanField(default=False)),
                ('climate_zone', models.CharField(blank=True, default='', max_length=200)),
                ('lock_aspect_ratio', models.BooleanField(default=True)),
                ('density', models.CharField(default='balanced', max_length=20)),
                ('status', models.CharField(choices=[('QUEUED', 'Queued'), ('GENERATING', 'Generating'), ('VALIDATING', 'Validating'), ('RETRYING', 'Retrying'), ('SUCCESS', 'Success'), ('FAILED', 'Failed'), ('QUOTA_EXCEEDED', 'Quota exceeded'), ('SUPERSEDED', 'Superseded')], default='QUEUED', max_length=20)),
                ('attempts', models.PositiveSmallIntegerField(default=0)),
                ('notifications', models.JSONField(blank=True, default=list)),
                ('error_kind', models.CharField(blank=True, max_length=40, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='jobs', to='api.account')),
                ('redesign', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='api.redesign')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
