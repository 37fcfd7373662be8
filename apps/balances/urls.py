from django.urls import path
from . import views

app_name = 'balances'

# Mounted under /api/groups/<uuid:group_id>/
urlpatterns = [
    # Balances
    path('balances/', views.group_balances, name='group-balances'),
    path('balances/me/', views.my_balances, name='my-balances'),
    path('balances/members/<uuid:member_id>/', views.member_balance, name='member-balance'),

    # Debts
    path('debts/', views.my_debts, name='my-debts'),
    path('debts/suggestions/', views.settlement_suggestions, name='settlement-suggestions'),
    path('debts/what-if/', views.what_if, name='what-if'),

    # Settlements
    path('settlements/validate/', views.validate_settlement, name='validate-settlement'),
    path('settlements/', views.settlements, name='settlements'),
]
