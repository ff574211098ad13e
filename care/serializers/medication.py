import bleach
from rest_framework import serializers


class MedicationWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dose = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False, allow_null=True)
    doseFrequency = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    usageTimes = serializers.ListField(child=serializers.TimeField(), required=False, allow_null=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name is required')
        return v

    def validate_description(self, v):
        if v is None:
            return None
        return bleach.clean(v.strip(), strip=True)
