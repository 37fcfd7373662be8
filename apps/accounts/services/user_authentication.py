"""
Login for ledger accounts.

Invitations can be added for an email that already has an account
without going through ``invite_member`` (the group admin inline is one
way). Those rows stay unlinked until the person logs in, so a
successful login claims them. The member keeps any expenses and
settlements recorded against the invitation.
"""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.groups.services import link_pending_memberships

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()

logger = logging.getLogger(__name__)


def _account_for(email: str, password: str) -> User:
    user = User.objects.filter(email=User.objects.normalize_email(email)).first()

    # Same message for unknown email and wrong password
    if user is None or not user.check_password(password):
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    return user


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and claim group invitations still waiting on this email.

    Args:
        email: User's email, any case
        password: User's password

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    user = _account_for(email, password)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    claimed = link_pending_memberships(user=user)
    if claimed:
        logger.info("Login by %s claimed %d group invitation(s)", user.email, claimed)

    return user
