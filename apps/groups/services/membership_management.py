"""
Membership management service.

Members are added by email. Someone who already has an account joins as
an active member straight away; anyone else is recorded as invited and
linked to their account when they register.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, MemberRole, MemberStatus

from .exceptions import (
    GroupNotFoundError,
    MemberNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CannotRemoveOwnerError,
    MemberHasLedgerHistoryError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def invite_member(
    *,
    group_id: UUID,
    email: str,
    invited_by: User,
    display_name: str = '',
) -> GroupMember:
    """
    Add someone to a group by email.

    Uses row-level locking on the group so two invitations for the same
    email cannot race.

    Args:
        group_id: UUID of the group
        email: Email of the person to add
        invited_by: Member performing the invitation
        display_name: Optional name to show until they register

    Returns:
        Created GroupMember instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If invited_by is not a member
        AlreadyMemberError: If the email is already in the group
    """
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(invited_by):
        raise NotMemberError(f"You are not a member of {group.name}")

    email = User.objects.normalize_email(email)
    if group.members.filter(email=email).exists():
        raise AlreadyMemberError(f"{email} is already a member of {group.name}")

    user = User.objects.filter(email=email).first()

    try:
        member = GroupMember.objects.create(
            group=group,
            email=email,
            user=user,
            display_name=display_name or (user.display_name if user else ''),
            status=MemberStatus.ACTIVE if user else MemberStatus.INVITED,
            role=MemberRole.MEMBER,
            joined_at=timezone.now() if user else None,
        )
    except IntegrityError:
        raise AlreadyMemberError(f"{email} is already a member of {group.name}")

    logger.info("%s added to group %s as %s", email, group.id, member.status)
    return member


@transaction.atomic
def remove_member(
    *,
    group_id: UUID,
    member_id: UUID,
    removed_by: User
) -> None:
    """
    Remove a member from a group (admin only).

    Members who paid, owe a share of, or took part in a settlement stay
    in the group: removing them would orphan ledger records.

    Raises:
        GroupNotFoundError: If group doesn't exist
        MemberNotFoundError: If target member is not in the group
        CannotRemoveOwnerError: If trying to remove the owner
        MemberHasLedgerHistoryError: If the member appears in the ledger
        InsufficientPermissionsError: If removed_by is not admin
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_admin(removed_by):
        raise InsufficientPermissionsError("Only group admins can remove members")

    try:
        member = (
            GroupMember.objects
            .select_for_update()
            .get(group=group, id=member_id)
        )
    except GroupMember.DoesNotExist:
        raise MemberNotFoundError("Member not found in this group")

    if member.user_id is not None and member.user_id == group.owner_id:
        raise CannotRemoveOwnerError("Cannot remove the group owner")

    if (
        member.paid_expenses.exists()
        or member.expense_splits.exists()
        or member.settlements_paid.exists()
        or member.settlements_received.exists()
    ):
        raise MemberHasLedgerHistoryError(
            f"{member.email} has expenses or settlements in this group and cannot be removed"
        )

    logger.info("%s removed from group %s", member.email, group.id)
    member.delete()


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMember]:
    """
    Get all members of a group.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMember.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('invited_at')
    )


def get_membership(*, group_id: UUID, user: User) -> GroupMember:
    """
    Get the user's own membership in a group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If the user is not a member
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    member = group.get_member_for_user(user)
    if member is None:
        raise NotMemberError(f"You are not a member of {group.name}")
    return member


def get_member(*, group_id: UUID, member_id: UUID) -> GroupMember:
    """
    Raises:
        MemberNotFoundError: If no such member exists in the group
    """
    try:
        return GroupMember.objects.select_related('user').get(group_id=group_id, id=member_id)
    except GroupMember.DoesNotExist:
        raise MemberNotFoundError("Member not found in this group")


def find_member_by_email(*, group_id: UUID, email: str) -> Optional[GroupMember]:
    return (
        GroupMember.objects
        .select_related('user')
        .filter(group_id=group_id, email=User.objects.normalize_email(email))
        .first()
    )


@transaction.atomic
def link_pending_memberships(*, user: User) -> int:
    """
    Attach a user to every unlinked invitation for their email.

    Returns:
        Number of memberships linked
    """
    pending = (
        GroupMember.objects
        .select_for_update()
        .filter(
            email=User.objects.normalize_email(user.email),
            user__isnull=True,
            status=MemberStatus.INVITED,
        )
    )

    linked = 0
    now = timezone.now()
    for member in pending:
        member.user = user
        member.status = MemberStatus.ACTIVE
        member.joined_at = now
        if not member.display_name:
            member.display_name = user.display_name
        member.save(update_fields=['user', 'status', 'joined_at', 'display_name'])
        linked += 1

    return linked
