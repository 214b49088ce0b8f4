import base64
from django.conf import settings
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.shortcuts import get_object_or_404
from apps.nano_banana import client as nano_banana
from apps.redesign import history
from apps.redesign.errors import GenerationError, QuotaExceeded, sanitize_error
from apps.redesign.ledger import check_limit
from apps.redesign.ratelimit import RateLimiter
from apps.redesign.styles import style_name
from .models import Account, Redesign, RedesignJob
from .serializers import (
    ElementImageSerializer,
    ElementInfoSerializer,
    RedesignJobSerializer,
    RedesignRequestSerializer,
    RedesignSerializer,
    ReplacementsSerializer,
    UsageSerializer,
)
from .tasks import process_redesign_task
from google.api_core.exceptions import GoogleAPIError
import logging

logger = logging.getLogger(__name__)

redesign_limiter = RateLimiter(
    'redesign',
    settings.REDESIGN_RATE_LIMIT_REQUESTS,
    settings.REDESIGN_RATE_LIMIT_WINDOW,
)

class AccountAPIView(APIView):
    """
    Resolves the caller's Account. Anonymous callers are sent to sign in
    rather than receiving an error payload.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.account = None
        if request.user and request.user.is_authenticated:
            self.account, _ = Account.objects.get_or_create(user=request.user)

    def handle_signin(self):
        return Response({"redirect": settings.LOGIN_URL}, status=status.HTTP_401_UNAUTHORIZED)

class RedesignView(AccountAPIView):
    def get(self, request):
        if not self.account:
            return self.handle_signin()
        redesigns = history.list_redesigns(self.account)
        return Response(RedesignSerializer(redesigns, many=True).data)

    def post(self, request):
        if not self.account:
            return self.handle_signin()

        if not redesign_limiter.check(self.account.pk):
            wait = redesign_limiter.seconds_until_reset(self.account.pk)
            return Response(
                {"error": f"Rate limit exceeded. Please wait {wait} seconds before trying again.",
                 "retry_after": wait},
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )

        serializer = RedesignRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        # Fast path: never queue a job the ledger would refuse anyway
        usage = check_limit(self.account)
        if usage.has_reached_limit:
            error = QuotaExceeded(usage.limit)
            return Response(
                {"error": str(error), "error_kind": error.kind, "limit": usage.limit},
                status=status.HTTP_403_FORBIDDEN,
            )

        # A new request from the same UI context replaces any in-flight one
        RedesignJob.objects.filter(
            account=self.account, context_key=data['context_key'],
        ).exclude(status__in=RedesignJob.TERMINAL_STATUSES).update(status='SUPERSEDED')

        job = RedesignJob.objects.create(
            account=self.account,
            context_key=data['context_key'],
            source_image=data['image_bytes'],
            source_mime_type=data['mime_type'],
            styles=data['styles'],
            allow_structural_changes=data['allow_structural_changes'],
            climate_zone=data['climate_zone'],
            lock_aspect_ratio=data['lock_aspect_ratio'],
            density=data['density'],
        )
        logger.info(f"Queued redesign job {job.id} for account {self.account.pk}")

        if getattr(settings, 'CELERY_TASK_ALWAYS_EAGER', False):
            # In eager mode, use apply() to execute synchronously and avoid broker connection
            process_redesign_task.apply(args=[str(job.id)])
            job.refresh_from_db()
        else:
            process_redesign_task.delay(str(job.id))

        return Response(RedesignJobSerializer(job).data, status=status.HTTP_202_ACCEPTED)

class RedesignJobView(AccountAPIView):
    def get(self, request, job_id):
        if not self.account:
            return self.handle_signin()
        job = get_object_or_404(RedesignJob, id=job_id, account=self.account)
        return Response(RedesignJobSerializer(job).data)

class RedesignJobCancelView(AccountAPIView):
    def post(self, request, job_id):
        if not self.account:
            return self.handle_signin()
        job = get_object_or_404(RedesignJob, id=job_id, account=self.account)
        RedesignJob.objects.filter(id=job.id).exclude(
            status__in=RedesignJob.TERMINAL_STATUSES,
        ).update(status='SUPERSEDED')
        job.refresh_from_db()
        return Response(RedesignJobSerializer(job).data)

class RedesignItemView(AccountAPIView):
    def get(self, request, redesign_id):
        if not self.account:
            return self.handle_signin()
        redesign = get_object_or_404(Redesign, id=redesign_id, account=self.account)
        return Response(RedesignSerializer(redesign).data)

    def delete(self, request, redesign_id):
        if not self.account:
            return self.handle_signin()
        try:
            history.delete_redesign(self.account, redesign_id)
        except Redesign.DoesNotExist:
            return Response({"error": "Not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

class RedesignPinView(AccountAPIView):
    def post(self, request, redesign_id):
        if not self.account:
            return self.handle_signin()
        try:
            redesign = history.toggle_pin(self.account, redesign_id)
        except Redesign.DoesNotExist:
            return Response({"error": "Not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(RedesignSerializer(redesign).data)

class UsageView(AccountAPIView):
    def get(self, request):
        if not self.account:
            return self.handle_signin()
        usage = check_limit(self.account)
        return Response(UsageSerializer(usage).data)

class ElementInfoView(AccountAPIView):
    def post(self, request):
        if not self.account:
            return self.handle_signin()
        serializer = ElementInfoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            info = nano_banana.describe_element(serializer.validated_data['name'])
        except (GenerationError, GoogleAPIError, ValueError) as e:
            logger.error(f"Element info failed: {e!r}")
            return Response({"error": sanitize_error(e)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"info": info})

class ReplacementsView(AccountAPIView):
    def post(self, request):
        if not self.account:
            return self.handle_signin()
        serializer = ReplacementsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            suggestions = nano_banana.suggest_replacements(
                data['name'],
                [style_name(s) for s in data['styles']],
                data['climate_zone'],
            )
        except (GenerationError, GoogleAPIError, ValueError) as e:
            logger.error(f"Replacement suggestions failed: {e!r}")
            return Response({"error": sanitize_error(e)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"suggestions": suggestions})

class ElementImageView(AccountAPIView):
    def post(self, request):
        if not self.account:
            return self.handle_signin()
        serializer = ElementImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            image_bytes, mime_type = nano_banana.generate_element_image(data['name'], data['description'])
        except (GenerationError, GoogleAPIError, ValueError) as e:
            logger.error(f"Element image failed: {e!r}")
            return Response({"error": sanitize_error(e)}, status=status.HTTP_502_BAD_GATEWAY)
        encoded = base64.b64encode(image_bytes).decode('ascii')
        return Response({"image": f"data:{mime_type};base64,{encoded}"})
