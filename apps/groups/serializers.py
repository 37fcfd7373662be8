from rest_framework import serializers
from .models import Group, GroupMember
from apps.accounts.models import User


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class GroupMemberSerializer(serializers.ModelSerializer):
    """Member of a group, registered or invited."""

    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    display_name = serializers.SerializerMethodField()
    is_registered = serializers.SerializerMethodField()

    class Meta:
        model = GroupMember
        fields = [
            'id',
            'email',
            'user_id',
            'display_name',
            'status',
            'role',
            'is_registered',
            'invited_at',
            'joined_at',
        ]
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()

    def get_is_registered(self, obj):
        return obj.user_id is not None


def _normalize_currencies(codes):
    normalized = []
    for code in codes:
        code = code.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise serializers.ValidationError(f"'{code}' is not a three-letter currency code")
        if code not in normalized:
            normalized.append(code)
    return normalized


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    owner = UserMinimalSerializer(read_only=True)
    members = GroupMemberSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()
    user_role = serializers.SerializerMethodField()
    accepted_currencies = serializers.ListField(child=serializers.CharField(max_length=3), required=False)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'currency',
            'accepted_currencies',
            'owner',
            'members',
            'member_count',
            'user_role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'owner', 'created_at', 'updated_at']

    def get_member_count(self, obj):
        """Get number of members in the group."""
        return obj.members.count()

    def get_user_role(self, obj):
        """Get current user's role in the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            member = obj.get_member_for_user(request.user)
            return member.role if member else None
        return None


class GroupCreateSerializer(serializers.Serializer):
    """Input for creating or updating a group."""

    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    currency = serializers.CharField(required=False, max_length=3)
    accepted_currencies = serializers.ListField(
        child=serializers.CharField(max_length=3),
        required=False,
    )

    def validate_currency(self, value):
        return _normalize_currencies([value])[0]

    def validate_accepted_currencies(self, value):
        return _normalize_currencies(value)


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    owner = UserMinimalSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'currency',
            'owner',
            'member_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.members.count()


class InviteMemberSerializer(serializers.Serializer):
    """Input for adding a member by email."""

    email = serializers.EmailField()
    display_name = serializers.CharField(required=False, allow_blank=True, max_length=150, default='')


class RemoveMemberSerializer(serializers.Serializer):
    member_id = serializers.UUIDField()
