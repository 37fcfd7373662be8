import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, MemberRole, MemberStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def group_owner(db):
    """Create and return a test user (group owner)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Group Owner',
    )


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Group Member',
    )


@pytest.fixture
def group_other_user(db):
    """Create and return a user not in any group."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other User',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def authenticated_client(group_owner):
    """Return API client authenticated as group owner."""
    return _client_for(group_owner)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as group member."""
    return _client_for(member_user)


@pytest.fixture
def other_client(group_other_user):
    """Return API client authenticated as non-member user."""
    return _client_for(group_other_user)


@pytest.fixture
def group(db, group_owner):
    """Create and return a test group with the owner as admin member."""
    group = Group.objects.create(
        name='Trip to Goa',
        description='Beach weekend',
        currency='INR',
        owner=group_owner,
    )
    GroupMember.objects.create(
        group=group,
        email=group_owner.email,
        user=group_owner,
        status=MemberStatus.ACTIVE,
        role=MemberRole.ADMIN,
    )
    return group


@pytest.fixture
def group_with_members(group, member_user):
    """Group with owner, a registered member and an invited member."""
    GroupMember.objects.create(
        group=group,
        email=member_user.email,
        user=member_user,
        status=MemberStatus.ACTIVE,
        role=MemberRole.MEMBER,
    )
    GroupMember.objects.create(
        group=group,
        email='pending@example.com',
        status=MemberStatus.INVITED,
    )
    return group
