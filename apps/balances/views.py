from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.models import GroupMember
from apps.groups.permissions import IsGroupMemberInURL
from apps.groups.services import (
    get_membership,
    GroupNotFoundError,
    MemberNotFoundError,
    NotMemberError,
)

from .serializers import (
    # Input serializers
    ActivityQuerySerializer,
    SettlementQuerySerializer,
    SettlementProposalSerializer,
    SettlementCreateSerializer,
    WhatIfRequestSerializer,
    # Response serializers
    BalanceSummarySerializer,
    MemberBalanceSerializer,
    PairwiseBalancesSerializer,
    SettlementSuggestionsSerializer,
    WhatIfResultSerializer,
    ValidationResultSerializer,
    ActivityLineSerializer,
    SettlementSerializer,
    ErrorSerializer,
)
from .services import (
    build_balance_summary,
    get_member_balance,
    get_pairwise_balances,
    get_settlement_suggestions,
    simulate_group_settlements,
    check_settlement_proposal,
    record_settlement,
    get_settlement_history,
    get_member_activity,
    DataIntegrityError,
    SettlementRejectedError,
)


class SettlementPagination(PageNumberPagination):
    """Custom pagination for settlement history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _members_context(group_id):
    """Serializer context resolving member emails to GroupMember rows."""
    members = GroupMember.objects.filter(group_id=group_id).select_related('user')
    return {'members': {member.email: member for member in members}}


@extend_schema(
    responses={
        200: BalanceSummarySerializer,
        400: ErrorSerializer,
        403: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Per-member balances of a group and the fewest payments that settle them.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def group_balances(request, group_id):
    """Get group balance summary - thin HTTP handler."""
    try:
        summary = build_balance_summary(group_id=group_id)
    except GroupNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(BalanceSummarySerializer(summary, context=_members_context(group_id)).data)


@extend_schema(
    responses={200: PairwiseBalancesSerializer, 400: ErrorSerializer, 403: ErrorSerializer},
    description="What the current user owes, or is owed by, each other member.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def my_balances(request, group_id):
    """Get the current user's pairwise balances - thin HTTP handler."""
    try:
        data = get_pairwise_balances(group_id=group_id, user=request.user)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PairwiseBalancesSerializer(data).data)


@extend_schema(
    responses={200: MemberBalanceSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="One member's balance and the suggested payments involving them.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def member_balance(request, group_id, member_id):
    """Get one member's balance - thin HTTP handler."""
    try:
        data = get_member_balance(group_id=group_id, member_id=member_id)
    except MemberNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(MemberBalanceSerializer(data, context=_members_context(group_id)).data)


@extend_schema(
    parameters=[
        OpenApiParameter('other_email', OpenApiTypes.EMAIL, description='Only lines with this member'),
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
    ],
    responses={200: ActivityLineSerializer(many=True), 403: ErrorSerializer},
    description="Expense shares and settlements involving the current user, newest first.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def my_debts(request, group_id):
    """Get the current user's debt activity - thin HTTP handler."""
    query_serializer = ActivityQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        member = get_membership(group_id=group_id, user=request.user)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    lines = get_member_activity(
        group_id=group_id,
        member=member,
        other_email=params.get('other_email'),
        start_date=params.get('start_date'),
        end_date=params.get('end_date')
    )

    return Response(ActivityLineSerializer(lines, many=True).data)


@extend_schema(
    responses={200: SettlementSuggestionsSerializer, 400: ErrorSerializer},
    description="Suggested settlement payments with optimization statistics and tips.",
    tags=['balances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def settlement_suggestions(request, group_id):
    """Get settlement suggestions - thin HTTP handler."""
    try:
        data = get_settlement_suggestions(group_id=group_id)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SettlementSuggestionsSerializer(data, context=_members_context(group_id)).data)


@extend_schema(
    request=WhatIfRequestSerializer,
    responses={200: WhatIfResultSerializer, 400: ErrorSerializer},
    description="Project balances after hypothetical settlements. Nothing is stored.",
    tags=['balances'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def what_if(request, group_id):
    """Simulate settlements - thin HTTP handler."""
    serializer = WhatIfRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        result = simulate_group_settlements(
            group_id=group_id,
            proposed=data['settlements'],
            apply_suggestions=data['apply_suggestions']
        )
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(WhatIfResultSerializer(result, context=_members_context(group_id)).data)


@extend_schema(
    request=SettlementProposalSerializer,
    responses={200: ValidationResultSerializer, 400: ErrorSerializer},
    description="Check whether a settlement would be accepted, without recording it.",
    tags=['settlements'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def validate_settlement(request, group_id):
    """Dry-run settlement validation - thin HTTP handler."""
    serializer = SettlementProposalSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = check_settlement_proposal(
            group_id=group_id,
            user=request.user,
            **serializer.validated_data
        )
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(ValidationResultSerializer(result).data)


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('member_email', OpenApiTypes.EMAIL, description='Only settlements involving this member'),
        OpenApiParameter('status', OpenApiTypes.STR, description="'pending' or 'completed'"),
    ],
    responses={200: SettlementSerializer(many=True)},
    description="Settlement history of a group, newest first.",
    tags=['settlements'],
)
@extend_schema(
    methods=['POST'],
    request=SettlementCreateSerializer,
    responses={201: SettlementSerializer, 400: ErrorSerializer, 403: ErrorSerializer},
    description="Record a payment between two members. Rejected settlements return the reason and code.",
    tags=['settlements'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGroupMemberInURL])
def settlements(request, group_id):
    """List or record settlements - thin HTTP handler."""
    if request.method == 'GET':
        query_serializer = SettlementQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        queryset = get_settlement_history(
            group_id=group_id,
            member_email=params.get('member_email'),
            status=params.get('status')
        )
        paginator = SettlementPagination()
        page = paginator.paginate_queryset(queryset, request)
        return paginator.get_paginated_response(SettlementSerializer(page, many=True).data)

    serializer = SettlementCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        settlement = record_settlement(
            group_id=group_id,
            user=request.user,
            **serializer.validated_data
        )
    except SettlementRejectedError as e:
        return Response(
            {'error': e.result.reason, 'code': e.result.code},
            status=status.HTTP_400_BAD_REQUEST
        )
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except DataIntegrityError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)
