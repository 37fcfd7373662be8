from django.db.models import Q
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.balances.services.exceptions import DataIntegrityError
from apps.groups.models import Group
from apps.groups.services import GroupNotFoundError, NotMemberError

from .models import Expense
from .serializers import (
    ExpenseSerializer,
    ExpenseCreateSerializer,
    ExpenseQuerySerializer,
    ExpenseSettleSerializer,
    ErrorSerializer,
)
from .services import (
    create_expense,
    set_expense_settled,
    ExpensesServiceError,
)


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ExpenseViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for expenses.

    list: Expenses of one group (?group=) or of all the user's groups
    create: Record an expense with an equal or explicit split
    retrieve: Get a specific expense
    settle: Mark an expense settled or unsettled
    """

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination

    def get_queryset(self):
        """Only expenses of groups the user belongs to."""
        user = self.request.user
        queryset = (
            Expense.objects
            .filter(Q(group__members__user=user) | Q(group__members__email=user.email))
            .select_related('paid_by__user', 'created_by')
            .prefetch_related('splits__member__user')
            .distinct()
        )

        if self.action != 'list':
            return queryset

        query_serializer = ExpenseQuerySerializer(data=self.request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        group_id = params.get('group')
        if group_id:
            group = Group.objects.filter(id=group_id).first()
            if group is None:
                raise NotFound('Group not found.')
            if not group.has_member(user):
                raise PermissionDenied('You are not a member of this group.')
            queryset = queryset.filter(group_id=group_id)

        if not params['include_settled']:
            queryset = queryset.filter(settled=False)

        return queryset

    @extend_schema(
        parameters=[
            OpenApiParameter('group', OpenApiTypes.UUID, description='Group ID'),
            OpenApiParameter('include_settled', OpenApiTypes.BOOL, description='Include settled expenses'),
        ],
        tags=['expenses'],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
        tags=['expenses'],
    )
    def create(self, request, *args, **kwargs):
        """Record an expense - thin HTTP handler."""
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = create_expense(
                group_id=data.pop('group'),
                created_by=request.user,
                **data
            )
        except GroupNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (ExpensesServiceError, DataIntegrityError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        output = ExpenseSerializer(Expense.objects.prefetch_related('splits__member').get(id=expense.id))
        return Response(output.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=ExpenseSettleSerializer,
        responses={200: ExpenseSerializer},
        tags=['expenses'],
    )
    @action(detail=True, methods=['post'])
    def settle(self, request, pk=None):
        """Mark an expense settled (or unsettled with {"settled": false})."""
        expense = self.get_object()
        serializer = ExpenseSettleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = set_expense_settled(
                expense_id=expense.id,
                user=request.user,
                settled=serializer.validated_data['settled'],
            )
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(ExpenseSerializer(expense).data)
