"""
Group management service.

Handles group CRUD operations with proper transaction safety.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, MemberRole, MemberStatus

from .exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


@transaction.atomic
def create_group(
    *,
    name: str,
    owner: User,
    description: str = '',
    currency: Optional[str] = None,
    accepted_currencies: Optional[List[str]] = None,
) -> Group:
    """
    Create a new group and add the creator as an admin member.

    Args:
        name: Group name
        owner: User who creates the group
        description: Optional group description
        currency: Three-letter currency code (defaults to
            LEDGER_DEFAULT_CURRENCY)
        accepted_currencies: Extra currencies settlements may use

    Returns:
        Created Group instance
    """
    group = Group(
        name=name,
        owner=owner,
        description=description,
        accepted_currencies=accepted_currencies or [],
    )
    if currency:
        group.currency = currency
    group.save()

    GroupMember.objects.create(
        group=group,
        email=owner.email,
        user=owner,
        display_name=owner.display_name,
        status=MemberStatus.ACTIVE,
        role=MemberRole.ADMIN,
        joined_at=timezone.now(),
    )

    logger.info("Group %s created by %s", group.id, owner.email)
    return group


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID with its members prefetched.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_related('owner')
            .prefetch_related(
                Prefetch(
                    'members',
                    queryset=GroupMember.objects.select_related('user')
                )
            )
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


@transaction.atomic
def update_group(
    *,
    group_id: UUID,
    user: User,
    name: Optional[str] = None,
    description: Optional[str] = None,
    currency: Optional[str] = None,
    accepted_currencies: Optional[List[str]] = None,
) -> Group:
    """
    Update group details (admin only).

    Uses select_for_update to prevent concurrent modifications.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not admin
    """
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_admin(user):
        raise InsufficientPermissionsError("Only group admins can update the group")

    update_fields = ['updated_at']

    if name is not None:
        group.name = name
        update_fields.append('name')

    if description is not None:
        group.description = description
        update_fields.append('description')

    if currency is not None:
        group.currency = currency
        update_fields.append('currency')

    if accepted_currencies is not None:
        group.accepted_currencies = accepted_currencies
        update_fields.append('accepted_currencies')

    group.save(update_fields=update_fields)

    return group


@transaction.atomic
def delete_group(*, group_id: UUID, user: User) -> None:
    """
    Delete a group (owner only).

    Members, expenses and settlements are removed with it.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If user is not the owner
    """
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if group.owner_id != user.id:
        raise InsufficientPermissionsError("Only the group owner can delete the group")

    logger.info("Group %s deleted by %s", group.id, user.email)
    group.delete()
