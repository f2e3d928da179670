from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import Club, Membership


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = get_user_model()
        fields = ['id', 'username', 'name', 'email']

    def get_name(self, obj):
        return obj.get_full_name() or obj.get_username()


class MembershipSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Membership
        fields = ['id', 'user', 'role', 'created_at']


class ClubSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()

    class Meta:
        model = Club
        fields = ['id', 'name', 'description', 'role', 'created_at']
        read_only_fields = ['created_at']

    def get_role(self, obj):
        request = self.context.get('request')
        if request is None:
            return None
        membership = obj.memberships.filter(user=request.user).first()
        return membership.role if membership else None
