import re

import bleach
from rest_framework import serializers

PHONE_RE = re.compile(r'^\+?[0-9 ()-]{6,20}$')


class PatientWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)
    gender = serializers.ChoiceField(choices=['male', 'female'], required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    userId = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v

    def validate_phone(self, v):
        v = (v or '').strip()
        if not PHONE_RE.match(v):
            raise serializers.ValidationError('invalid phone number')
        return v

    def validate_address(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_city(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
