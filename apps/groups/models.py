# ==========================================
# apps/groups/models.py
# ==========================================

from django.conf import settings
from django.db import models
import uuid

from apps.accounts.models import User


def default_currency():
    return settings.LEDGER_DEFAULT_CURRENCY


class MemberRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MEMBER = 'member', 'Member'


class MemberStatus(models.TextChoices):
    INVITED = 'invited', 'Invited'
    ACTIVE = 'active', 'Active'


class Group(models.Model):
    """Group of people sharing expenses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    currency = models.CharField(max_length=3, default=default_currency)
    accepted_currencies = models.JSONField(default=list, blank=True)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='owned_groups')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='groups_owner_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.currency = (self.currency or '').upper()
        self.accepted_currencies = [c.upper() for c in self.accepted_currencies or []]
        super().save(*args, **kwargs)

    def get_accepted_currencies(self):
        """Group currency, then its extra currencies, then site-wide ones."""
        accepted = [self.currency]
        for code in list(self.accepted_currencies or []) + list(settings.LEDGER_ACCEPTED_CURRENCIES):
            code = code.upper()
            if code and code not in accepted:
                accepted.append(code)
        return accepted

    def has_member(self, user):
        return self.get_member_for_user(user) is not None

    def get_member_for_user(self, user):
        """
        Find the user's membership, by account first and then by email.

        Invitations made before the user registered are only linked by
        email, so both lookups are needed.
        """
        if user is None or not user.is_authenticated:
            return None
        member = self.members.filter(user=user).first()
        if member is None:
            member = self.members.filter(email=User.objects.normalize_email(user.email)).first()
        return member

    def is_admin(self, user):
        member = self.get_member_for_user(user)
        return member is not None and member.role == MemberRole.ADMIN


class GroupMember(models.Model):
    """
    Participant in a group.

    A member is identified by email. ``user`` stays empty until someone
    registers with that email, so expenses can name people who have not
    signed up yet.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='members')
    email = models.EmailField()
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='group_memberships',
    )
    display_name = models.CharField(max_length=150, blank=True)
    status = models.CharField(max_length=20, choices=MemberStatus.choices, default=MemberStatus.INVITED)
    role = models.CharField(max_length=20, choices=MemberRole.choices, default=MemberRole.MEMBER)
    invited_at = models.DateTimeField(auto_now_add=True)
    joined_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'group_members'
        unique_together = [['group', 'email']]
        indexes = [
            models.Index(fields=['group', 'status'], name='group_members_group_status_idx'),
            models.Index(fields=['email', 'status'], name='group_members_email_status_idx'),
        ]
        ordering = ['invited_at']

    def __str__(self):
        return f"{self.email} in {self.group.name} ({self.status})"

    def save(self, *args, **kwargs):
        self.email = User.objects.normalize_email(self.email)
        super().save(*args, **kwargs)

    def get_display_name(self):
        if self.display_name:
            return self.display_name
        if self.user_id:
            return self.user.get_display_name()
        return self.email.split('@')[0]

    def identity(self):
        """The ledger identity for this member."""
        from apps.balances.services.domain import identity_for

        return identity_for(self.email, self.user_id)
