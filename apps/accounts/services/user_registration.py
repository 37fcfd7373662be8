"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from apps.groups.services import link_pending_memberships

from .exceptions import UserRegistrationError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new user and claim any group invitations sent to their email.

    Members invited by email before they had an account keep their
    balances: the invitation row is linked to the new account instead of
    creating a second member.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    normalized = User.objects.normalize_email(email)
    if User.objects.filter(email=normalized).exists():
        raise UserRegistrationError("A user with this email already exists")

    try:
        user = User.objects.create_user(
            email=normalized,
            password=password,
            display_name=display_name
        )
    except IntegrityError:
        raise UserRegistrationError("A user with this email already exists")

    linked = link_pending_memberships(user=user)
    if linked:
        logger.info("Linked %d pending group invitation(s) to %s", linked, user.email)

    return user
