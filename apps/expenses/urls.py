from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/?group={id}       - List expenses
    # POST   /api/expenses/                  - Create expense
    # GET    /api/expenses/{id}/             - Get expense
    # POST   /api/expenses/{id}/settle/      - Mark settled / unsettled
    path('', include(router.urls)),
]
