"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices. Managers that
perform admin mutations or touch identities get a privileged session; the
rest get a public-level session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db, get_service_db
from utils import identity_provider
from utils import invitation_manager
from utils import quiz_attempt_manager
from utils import quiz_manager
from utils import registration_flow
from utils import user_manager


def get_identity_provider(
    db: Session = Depends(get_service_db),
) -> identity_provider.IdentityProvider:
    """Get the identity provider bound to a privileged DB session.

    Args:
        db: Privileged database session.

    Returns:
        IdentityProvider instance.
    """
    return identity_provider.LocalIdentityProvider(db)


def get_invitation_manager(
    db: Session = Depends(get_service_db),
) -> invitation_manager.InvitationManager:
    """Get InvitationManager instance with request-scoped DB session.

    Args:
        db: Privileged database session.

    Returns:
        InvitationManager instance.
    """
    return invitation_manager.InvitationManager(db)


def get_user_manager(
    db: Session = Depends(get_service_db),
    provider: identity_provider.IdentityProvider = Depends(get_identity_provider),
) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Privileged database session.
        provider: Identity provider sharing the same session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db, provider)


def get_registration_flow(
    invitations: invitation_manager.InvitationManager = Depends(get_invitation_manager),
    users: user_manager.UserManager = Depends(get_user_manager),
    provider: identity_provider.IdentityProvider = Depends(get_identity_provider),
) -> registration_flow.RegistrationFlow:
    """Get RegistrationFlow wired to the request's managers."""
    return registration_flow.RegistrationFlow(invitations, users, provider)


def get_quiz_manager(db: Session = Depends(get_db)) -> quiz_manager.QuizManager:
    """Get QuizManager for reads (public-level session)."""
    return quiz_manager.QuizManager(db)


def get_admin_quiz_manager(
    db: Session = Depends(get_service_db),
) -> quiz_manager.QuizManager:
    """Get QuizManager for admin mutations (privileged session)."""
    return quiz_manager.QuizManager(db)


def get_quiz_attempt_manager(
    db: Session = Depends(get_db),
) -> quiz_attempt_manager.QuizAttemptManager:
    """Get QuizAttemptManager instance with request-scoped DB session."""
    return quiz_attempt_manager.QuizAttemptManager(db)


# Type aliases for dependency injection
IdentityProviderDep = Annotated[
    identity_provider.IdentityProvider, Depends(get_identity_provider)
]
InvitationManagerDep = Annotated[
    invitation_manager.InvitationManager, Depends(get_invitation_manager)
]
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
RegistrationFlowDep = Annotated[
    registration_flow.RegistrationFlow, Depends(get_registration_flow)
]
QuizManagerDep = Annotated[
    quiz_manager.QuizManager, Depends(get_quiz_manager)
]
AdminQuizManagerDep = Annotated[
    quiz_manager.QuizManager, Depends(get_admin_quiz_manager)
]
QuizAttemptManagerDep = Annotated[
    quiz_attempt_manager.QuizAttemptManager, Depends(get_quiz_attempt_manager)
]
