import bleach
from rest_framework import serializers

from care.models import Appointment


class AppointmentWriteSerializer(serializers.Serializer):
    appointmentDate = serializers.DateField()
    startTime = serializers.TimeField()
    endTime = serializers.TimeField()
    patientId = serializers.IntegerField(min_value=1)
    physicianId = serializers.IntegerField(min_value=1)
    meetingAddress = serializers.CharField(max_length=255)
    physicianNotes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES], required=False)

    def validate_meetingAddress(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('meetingAddress is required')
        return v

    def validate_physicianNotes(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate(self, attrs):
        start, end = attrs.get('startTime'), attrs.get('endTime')
        if start and end and end <= start:
            raise serializers.ValidationError({'endTime': 'must be after startTime'})
        return attrs


class AppointmentListQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    patientId = serializers.IntegerField(required=False, min_value=1)
    physicianId = serializers.IntegerField(required=False, min_value=1)
