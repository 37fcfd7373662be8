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
def payer_user(db):
    """Create and return the user recording expenses (group owner)."""
    return User.objects.create_user(
        email='payer@example.com',
        password='TestPass123!',
        display_name='Payer',
    )


@pytest.fixture
def friend_user(db):
    return User.objects.create_user(
        email='friend@example.com',
        password='TestPass123!',
        display_name='Friend',
    )


@pytest.fixture
def stranger_user(db):
    """User outside the expense group."""
    return User.objects.create_user(
        email='stranger@example.com',
        password='TestPass123!',
        display_name='Stranger',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def payer_client(payer_user):
    return _client_for(payer_user)


@pytest.fixture
def stranger_client(stranger_user):
    return _client_for(stranger_user)


@pytest.fixture
def expense_group(db, payer_user, friend_user):
    """INR group: payer (admin), friend (registered), guest (invited)."""
    group = Group.objects.create(name='Flat 4B', currency='INR', owner=payer_user)
    GroupMember.objects.create(
        group=group,
        email=payer_user.email,
        user=payer_user,
        status=MemberStatus.ACTIVE,
        role=MemberRole.ADMIN,
    )
    GroupMember.objects.create(
        group=group,
        email=friend_user.email,
        user=friend_user,
        status=MemberStatus.ACTIVE,
    )
    GroupMember.objects.create(
        group=group,
        email='guest@example.com',
        status=MemberStatus.INVITED,
    )
    return group
