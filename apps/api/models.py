from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid

class Account(models.Model):
    """Per-user plan and usage ledger for the current 30-day period."""
    PLAN_CHOICES = [
        ('Free', 'Free'),
        ('Personal', 'Personal'),
        ('Creator', 'Creator'),
        ('Business', 'Business'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='account')
    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default='Free')
    monthly_redesign_limit = models.PositiveIntegerField(default=3)
    redesigns_used = models.PositiveIntegerField(default=0)
    period_start = models.DateTimeField(default=timezone.now)

    polar_customer_id = models.CharField(max_length=100, null=True, blank=True, unique=True)
    subscription_id = models.CharField(max_length=100, null=True, blank=True)
    subscription_status = models.CharField(max_length=20, default='active')
    current_period_end = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.user} - {self.plan} ({self.redesigns_used}/{self.monthly_redesign_limit})"

class Redesign(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='redesigns')
    original_image_url = models.URLField(max_length=500)
    original_image_key = models.CharField(max_length=255)
    redesigned_image_url = models.URLField(max_length=500)
    redesigned_image_key = models.CharField(max_length=255)
    design_catalog = models.JSONField(default=dict, blank=True)
    styles = models.JSONField(default=list)
    climate_zone = models.CharField(max_length=200, blank=True, default='')
    is_pinned = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-is_pinned', '-created_at']
        indexes = [
            models.Index(fields=['account', 'is_pinned', 'created_at'], name='redesign_history_idx'),
        ]

    def __str__(self):
        return f"{self.id} - {', '.join(self.styles)}"

class RedesignJob(models.Model):
    STATUS_CHOICES = [
        ('QUEUED', 'Queued'),
        ('GENERATING', 'Generating'),
        ('VALIDATING', 'Validating'),
        ('RETRYING', 'Retrying'),
        ('SUCCESS', 'Success'),
        ('FAILED', 'Failed'),
        ('QUOTA_EXCEEDED', 'Quota exceeded'),
        ('SUPERSEDED', 'Superseded'),
    ]
    TERMINAL_STATUSES = ('SUCCESS', 'FAILED', 'QUOTA_EXCEEDED', 'SUPERSEDED')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='jobs')
    context_key = models.CharField(max_length=64, default='default')
    created_at = models.DateTimeField(auto_now_add=True)

    source_image = models.BinaryField()
    source_mime_type = models.CharField(max_length=50)
    styles = models.JSONField(default=list)
    allow_structural_changes = models.BooleanField(default=False)
    climate_zone = models.CharField(max_length=200, blank=True, default='')
    lock_aspect_ratio = models.BooleanField(default=True)
    density = models.CharField(max_length=20, default='balanced')

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='QUEUED')
    attempts = models.PositiveSmallIntegerField(default=0)
    notifications = models.JSONField(default=list, blank=True)
    error_kind = models.CharField(max_length=40, null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    redesign = models.ForeignKey(Redesign, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    class Meta:
        ordering = ['-created_at']

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def __str__(self):
        return f"{self.id} - {self.status}"

class WebhookEvent(models.Model):
    event_id = models.CharField(max_length=200, unique=True)
    event_type = models.CharField(max_length=100)
    payload = models.JSONField(default=dict, blank=True)
    processed = models.BooleanField(default=False)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({'done' if self.processed else 'pending'})"
