"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    MemberNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CannotRemoveOwnerError,
    MemberHasLedgerHistoryError,
    InsufficientPermissionsError,
)

from .group_management import (
    create_group,
    update_group,
    delete_group,
    get_group_by_id,
)

from .membership_management import (
    invite_member,
    remove_member,
    get_group_members,
    get_membership,
    get_member,
    find_member_by_email,
    link_pending_memberships,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'MemberNotFoundError',
    'AlreadyMemberError',
    'NotMemberError',
    'CannotRemoveOwnerError',
    'MemberHasLedgerHistoryError',
    'InsufficientPermissionsError',

    # Group Management
    'create_group',
    'update_group',
    'delete_group',
    'get_group_by_id',

    # Membership Management
    'invite_member',
    'remove_member',
    'get_group_members',
    'get_membership',
    'get_member',
    'find_member_by_email',
    'link_pending_memberships',
]
