from rest_framework import serializers


class DiseaseSearchQuerySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)


class PatientDiseaseCreateSerializer(serializers.Serializer):
    icd = serializers.CharField(max_length=16)
    diagnosisDate = serializers.DateField(required=False, allow_null=True)
    recoveredDate = serializers.DateField(required=False, allow_null=True)

    def validate_icd(self, v):
        v = (v or '').strip().upper()
        if not v:
            raise serializers.ValidationError('icd is required')
        return v

    def validate(self, attrs):
        diagnosed, recovered = attrs.get('diagnosisDate'), attrs.get('recoveredDate')
        if diagnosed and recovered and recovered < diagnosed:
            raise serializers.ValidationError({'recoveredDate': 'must not be before diagnosisDate'})
        return attrs


class IcdImportSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, f):
        if not f.name.lower().endswith('.txt'):
            raise serializers.ValidationError('Only .txt files are allowed')
        if not f.size:
            raise serializers.ValidationError('File is empty')
        return f
