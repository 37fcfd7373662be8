"""
API tests for expenses app.

Endpoints:
- GET/POST /api/expenses/
- GET /api/expenses/{id}/
- POST /api/expenses/{id}/settle/
"""

import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.expenses.models import Expense
from apps.expenses.services import create_expense


@pytest.fixture
def expense(expense_group, payer_user):
    return create_expense(
        group_id=expense_group.id,
        created_by=payer_user,
        description='Electricity bill',
        amount=Decimal('120.00'),
    )


@pytest.mark.django_db
class TestCreateExpenseAPI:
    """Tests for POST /api/expenses/"""

    def test_create_equal_split(self, payer_client, expense_group):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Pizza night',
            'amount': '120.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['amount'] == '120.00'
        assert response.data['currency'] == 'INR'
        assert response.data['paid_by_email'] == 'payer@example.com'
        assert len(response.data['splits']) == 3
        assert {s['share'] for s in response.data['splits']} == {'40.00'}

    def test_create_explicit_splits(self, payer_client, expense_group):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Museum',
            'amount': '45.00',
            'paid_by_email': 'friend@example.com',
            'splits': [
                {'email': 'payer@example.com', 'share': '22.50'},
                {'email': 'friend@example.com', 'share': '22.50'},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['paid_by_email'] == 'friend@example.com'
        assert len(response.data['splits']) == 2

    def test_splits_and_split_among_are_exclusive(self, payer_client, expense_group):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Museum',
            'amount': '45.00',
            'split_among': ['payer@example.com'],
            'splits': [{'email': 'payer@example.com', 'share': '45.00'}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_non_reconciling_splits(self, payer_client, expense_group):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Museum',
            'amount': '45.00',
            'splits': [{'email': 'payer@example.com', 'share': '40.00'}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert not Expense.objects.exists()

    def test_non_positive_amount(self, payer_client, expense_group):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Nothing',
            'amount': '0.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_non_member(self, stranger_client, expense_group):
        response = stranger_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Sneaky',
            'amount': '10.00',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_group(self, payer_client):
        response = payer_client.post(reverse('expenses:expense-list'), {
            'group': str(uuid4()),
            'description': 'Lost',
            'amount': '10.00',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unauthenticated(self, api_client, expense_group):
        response = api_client.post(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'description': 'Anon',
            'amount': '10.00',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestListExpensesAPI:
    """Tests for GET /api/expenses/"""

    def test_list_group_expenses(self, payer_client, expense_group, expense):
        response = payer_client.get(reverse('expenses:expense-list'), {'group': str(expense_group.id)})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['description'] == 'Electricity bill'

    def test_exclude_settled(self, payer_client, expense_group, expense):
        expense.settled = True
        expense.save()

        response = payer_client.get(reverse('expenses:expense-list'), {
            'group': str(expense_group.id),
            'include_settled': 'false',
        })

        assert response.data['count'] == 0

    def test_non_member_filtering_group(self, stranger_client, expense_group, expense):
        response = stranger_client.get(reverse('expenses:expense-list'), {'group': str(expense_group.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_non_member_sees_nothing(self, stranger_client, expense):
        response = stranger_client.get(reverse('expenses:expense-list'))

        assert response.data['count'] == 0

    def test_retrieve_hidden_from_non_member(self, stranger_client, expense):
        response = stranger_client.get(reverse('expenses:expense-detail', kwargs={'pk': expense.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestSettleExpenseAPI:
    """Tests for POST /api/expenses/{id}/settle/"""

    def test_settle(self, payer_client, expense):
        response = payer_client.post(reverse('expenses:expense-settle', kwargs={'pk': expense.id}), {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['settled'] is True

    def test_unsettle(self, payer_client, expense):
        expense.settled = True
        expense.save()

        response = payer_client.post(
            reverse('expenses:expense-settle', kwargs={'pk': expense.id}),
            {'settled': False},
            format='json',
        )

        assert response.data['settled'] is False
