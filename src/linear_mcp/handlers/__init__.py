from .auth import AuthHandler
from .base import BaseHandler
from .initiatives import InitiativeHandler
from .issues import IssueHandler
from .projects import ProjectHandler
from .teams import TeamHandler
from .users import UserHandler

__all__ = [
    "AuthHandler",
    "BaseHandler",
    "InitiativeHandler",
    "IssueHandler",
    "ProjectHandler",
    "TeamHandler",
    "UserHandler",
]
