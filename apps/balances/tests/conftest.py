import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.balances.services.domain import Invited, Registered
from apps.groups.models import Group, GroupMember, MemberRole, MemberStatus
from apps.balances.tests.factories import store_expense


# =============================================================================
# Engine fixtures (no database)
# =============================================================================

@pytest.fixture
def alice():
    return Registered(email='alice@example.com', user_id='user-alice')


@pytest.fixture
def bob():
    return Registered(email='bob@example.com', user_id='user-bob')


@pytest.fixture
def carol():
    """Invited member without an account."""
    return Invited(email='carol@example.com')


@pytest.fixture
def trio(alice, bob, carol):
    return [alice, bob, carol]


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice_user(db):
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        display_name='Alice',
    )


@pytest.fixture
def bob_user(db):
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        display_name='Bob',
    )


@pytest.fixture
def outsider(db):
    """User not in the ledger group."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def alice_client(alice_user):
    """API client authenticated as alice (group owner)."""
    return _client_for(alice_user)


@pytest.fixture
def bob_client(bob_user):
    return _client_for(bob_user)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)


@pytest.fixture
def ledger_group(db, alice_user, bob_user):
    """
    USD group with alice (owner, admin), bob (registered) and carol
    (invited, no account).
    """
    group = Group.objects.create(name='Road Trip', currency='USD', owner=alice_user)
    GroupMember.objects.create(
        group=group,
        email=alice_user.email,
        user=alice_user,
        status=MemberStatus.ACTIVE,
        role=MemberRole.ADMIN,
    )
    GroupMember.objects.create(
        group=group,
        email=bob_user.email,
        user=bob_user,
        status=MemberStatus.ACTIVE,
    )
    GroupMember.objects.create(
        group=group,
        email='carol@example.com',
        status=MemberStatus.INVITED,
    )
    return group


@pytest.fixture
def members(ledger_group):
    """``{'alice': GroupMember, 'bob': ..., 'carol': ...}``"""
    return {
        member.email.split('@')[0]: member
        for member in ledger_group.members.all()
    }


@pytest.fixture
def scenario_expenses(ledger_group, members):
    """
    Two unequal expenses:
        150.50 paid by bob, split alice 50.25 / bob 75.25 / carol 25.00
        45.00 paid by alice, split alice 22.50 / bob 22.50
    Balances: alice -27.75, bob +52.75, carol -25.00
    """
    return [
        store_expense(
            ledger_group,
            members['bob'],
            [(members['alice'], '50.25'), (members['bob'], '75.25'), (members['carol'], '25.00')],
            description='Hotel',
        ),
        store_expense(
            ledger_group,
            members['alice'],
            [(members['alice'], '22.50'), (members['bob'], '22.50')],
            description='Dinner',
        ),
    ]
