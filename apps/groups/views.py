from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Group
from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    InviteMemberSerializer,
    RemoveMemberSerializer,
)
from .permissions import IsGroupAdmin, IsGroupMember

from apps.groups.services import (
    create_group,
    update_group,
    delete_group,
    invite_member,
    remove_member,
    get_group_members,
    # Exceptions
    AlreadyMemberError,
    NotMemberError,
    MemberNotFoundError,
    CannotRemoveOwnerError,
    MemberHasLedgerHistoryError,
    InsufficientPermissionsError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class GroupViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Group CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of)
    create: Create a new group
    retrieve: Get a specific group
    update: Update a group (admin only)
    partial_update: Partially update a group (admin only)
    destroy: Delete a group (owner only)
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination

    def get_queryset(self):
        """Return only groups where user is a member."""
        user = self.request.user
        return Group.objects.filter(
            Q(members__user=user) | Q(members__email=user.email)
        ).select_related('owner').prefetch_related('members__user').distinct()

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return GroupCreateSerializer
        return GroupSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['update', 'partial_update', 'remove_member']:
            return [IsAuthenticated(), IsGroupAdmin()]
        if self.action in ['retrieve', 'members']:
            return [IsAuthenticated(), IsGroupMember()]
        return [IsAuthenticated()]

    @extend_schema(request=GroupCreateSerializer, responses={201: GroupSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = create_group(
            owner=request.user,
            **serializer.validated_data
        )

        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=GroupCreateSerializer, responses={200: GroupSerializer})
    def update(self, request, *args, **kwargs):
        """Update group details."""
        group = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            group = update_group(
                group_id=group.id,
                user=request.user,
                **serializer.validated_data
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data)

    def destroy(self, request, *args, **kwargs):
        """Delete a group."""
        group = self.get_object()
        try:
            delete_group(group_id=group.id, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    @extend_schema(
        request=InviteMemberSerializer,
        responses={200: GroupMemberSerializer(many=True), 201: GroupMemberSerializer},
    )
    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        """List members, or add one by email."""
        group = self.get_object()

        if request.method == 'GET':
            members = get_group_members(group_id=group.id)
            serializer = GroupMemberSerializer(members, many=True)
            return Response(serializer.data)

        serializer = InviteMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            member = invite_member(
                group_id=group.id,
                invited_by=request.user,
                **serializer.validated_data
            )
        except AlreadyMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(GroupMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RemoveMemberSerializer, responses={204: None})
    @action(detail=True, methods=['delete'])
    def remove_member(self, request, pk=None):
        """Remove a member from the group (admin only)."""
        group = self.get_object()
        serializer = RemoveMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_member(
                group_id=group.id,
                member_id=serializer.validated_data['member_id'],
                removed_by=request.user
            )
            return Response(status=status.HTTP_204_NO_CONTENT)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (CannotRemoveOwnerError, MemberHasLedgerHistoryError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
