"""
Custom permission classes for groups.

Permission Classes:
    IsGroupAdmin       - object permission, user is an admin member
    IsGroupMember      - object permission, user is a member
    IsGroupOwner       - object permission, user created the group
    IsGroupMemberInURL - group id taken from the URL (``group_id``)

Usage:
    from apps.groups.permissions import IsGroupMemberInURL

    @api_view(['GET'])
    @permission_classes([IsAuthenticated, IsGroupMemberInURL])
    def group_balances(request, group_id):
        # Membership already verified
        ...
"""

from rest_framework import permissions
from rest_framework.exceptions import NotFound

from .models import Group


class IsGroupAdmin(permissions.BasePermission):
    """
    Permission: User must be group admin.
    """

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.is_admin(request.user)


class IsGroupMember(permissions.BasePermission):
    """
    Permission: User must be a member of the group.
    """

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.has_member(request.user)


class IsGroupOwner(permissions.BasePermission):
    """
    Permission: User must be the group owner.
    """

    def has_object_permission(self, request, view, obj):
        # obj is a Group instance
        return obj.owner_id == request.user.id


class IsGroupMemberInURL(permissions.BasePermission):
    """
    Permission check for endpoints nested under /api/groups/{group_id}/.

    An unknown group is a 404; an existing group the user does not
    belong to is a 403. Invited members are matched by email, so a user
    who registered after being invited is let in as well.
    """

    message = 'You are not a member of this group.'

    def has_permission(self, request, view):
        group_id = view.kwargs.get('group_id')
        if not group_id:
            return False

        try:
            group = Group.objects.get(id=group_id)
        except Group.DoesNotExist:
            raise NotFound('Group not found.')

        return group.has_member(request.user)
