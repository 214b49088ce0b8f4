from rest_framework import serializers
from apps.redesign.errors import InvalidRequest
from apps.redesign.image_hygiene import inspect_image
from apps.redesign.styles import DENSITIES, MAX_STYLES, STYLE_IDS
from .models import Redesign, RedesignJob

class RedesignRequestSerializer(serializers.Serializer):
    image = serializers.FileField()
    styles = serializers.ListField(
        child=serializers.ChoiceField(choices=sorted(STYLE_IDS)),
        min_length=1,
        max_length=MAX_STYLES,
    )
    allow_structural_changes = serializers.BooleanField(default=False)
    climate_zone = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    lock_aspect_ratio = serializers.BooleanField(default=True)
    density = serializers.ChoiceField(choices=DENSITIES, default='balanced')
    context_key = serializers.CharField(max_length=64, required=False, default='default')

    def validate_styles(self, value):
        if len(set(value)) != len(value):
            raise serializers.ValidationError("Styles must not repeat.")
        return value

    def validate(self, attrs):
        image_bytes = attrs['image'].read()
        try:
            info = inspect_image(image_bytes)
        except InvalidRequest as e:
            raise serializers.ValidationError({'image': [str(e)]})
        attrs['image_bytes'] = image_bytes
        attrs['mime_type'] = info.mime_type
        return attrs

class RedesignSerializer(serializers.ModelSerializer):
    class Meta:
        model = Redesign
        fields = [
            'id', 'original_image_url', 'redesigned_image_url', 'design_catalog',
            'styles', 'climate_zone', 'is_pinned', 'created_at',
        ]

class RedesignJobSerializer(serializers.ModelSerializer):
    redesign = RedesignSerializer(read_only=True)

    class Meta:
        model = RedesignJob
        fields = [
            'id', 'status', 'attempts', 'notifications', 'error_kind', 'error_message',
            'styles', 'climate_zone', 'density', 'context_key', 'redesign', 'created_at',
        ]

class UsageSerializer(serializers.Serializer):
    plan = serializers.CharField()
    used = serializers.IntegerField()
    limit = serializers.IntegerField()
    remaining = serializers.IntegerField()
    has_reached_limit = serializers.BooleanField()
    is_unlimited = serializers.BooleanField()

class ElementInfoSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)

class ReplacementsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    styles = serializers.ListField(
        child=serializers.ChoiceField(choices=sorted(STYLE_IDS)),
        min_length=1,
        max_length=MAX_STYLES,
    )
    climate_zone = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')

class ElementImageSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
