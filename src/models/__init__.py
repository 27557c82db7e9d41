"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .auth_identity import AuthIdentityModel
from .password_reset import PasswordResetModel
from .quiz import QuizModel
from .quiz_attempt import QuizAttemptModel
from .student_invitation import StudentInvitationModel
from .user import UserModel

__all__ = [
    "Base",
    "AuthIdentityModel",
    "PasswordResetModel",
    "QuizModel",
    "QuizAttemptModel",
    "StudentInvitationModel",
    "UserModel",
]
