import bleach
from rest_framework import serializers


class SpecializationWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name is required')
        return v

    def validate_description(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class PhysicianWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    specializationId = serializers.IntegerField(min_value=1)
    clinicalAddress = serializers.CharField(max_length=255)
    sessionPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    userId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v

    def validate_clinicalAddress(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class FreeTimesSerializer(serializers.Serializer):
    times = serializers.ListField(child=serializers.DateTimeField(), allow_empty=False)


class FreeTimesQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
