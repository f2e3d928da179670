from rest_framework import serializers

from clubs.serializers import UserSummarySerializer
from events.serializers import CalendarEventSerializer
from .models import Attendance, CheckIn, CodeAttempt


class CheckInCodeSerializer(serializers.Serializer):
    code = serializers.CharField(min_length=6, max_length=10, trim_whitespace=True)


class ManualCheckInSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1, source='user_id')


class CheckInSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = CheckIn
        fields = ['id', 'attendance', 'user', 'membership', 'source', 'checked_in_at']


class CodeAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = CodeAttempt
        fields = ['id', 'user', 'ip_address', 'success', 'attempted_at']


class AttendanceSerializer(serializers.ModelSerializer):
    event = CalendarEventSerializer(read_only=True)
    check_ins = serializers.SerializerMethodField()

    class Meta:
        model = Attendance
        fields = ['id', 'event', 'club', 'grace_minutes', 'status', 'check_ins', 'created_at', 'updated_at']
        read_only_fields = ['club', 'created_at', 'updated_at']

    def get_check_ins(self, obj):
        check_ins = obj.check_ins.select_related('user').order_by('checked_in_at', 'id')
        return CheckInSerializer(check_ins, many=True).data


class AttendanceUpdateSerializer(serializers.ModelSerializer):
    grace_minutes = serializers.IntegerField(min_value=0, max_value=24 * 60, required=False)

    class Meta:
        model = Attendance
        fields = ['grace_minutes', 'status']
