from rest_framework import serializers
from .models import CalendarEvent


class CalendarEventSerializer(serializers.ModelSerializer):
    attendance_id = serializers.SerializerMethodField()

    class Meta:
        model = CalendarEvent
        fields = [
            'id',
            'club',
            'creator',
            'title',
            'description',
            'location',
            'start_at',
            'end_at',
            'attendance_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['creator', 'created_at', 'updated_at']

    def get_attendance_id(self, obj):
        attendance = getattr(obj, 'attendance', None)
        return attendance.id if attendance else None

    def validate(self, attrs):
        start_at = attrs.get('start_at', getattr(self.instance, 'start_at', None))
        end_at = attrs.get('end_at', getattr(self.instance, 'end_at', None))
        if start_at and end_at and end_at < start_at:
            raise serializers.ValidationError({'end_at': "The event can't end before it starts."})
        if self.instance is not None and 'club' in attrs and attrs['club'] != self.instance.club:
            raise serializers.ValidationError({'club': 'Events cannot be moved to another club.'})
        return attrs
