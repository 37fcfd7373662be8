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
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def pending_invitation(user):
    """Group owned by ``user`` with an invitation for newcomer@example.com."""
    group = Group.objects.create(name='Ski Trip', currency='EUR', owner=user)
    GroupMember.objects.create(
        group=group,
        email=user.email,
        user=user,
        status=MemberStatus.ACTIVE,
        role=MemberRole.ADMIN,
    )
    return GroupMember.objects.create(
        group=group,
        email='newcomer@example.com',
        status=MemberStatus.INVITED,
    )
