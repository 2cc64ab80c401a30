"""
BugLab Backend — ORM Models
============================

Importing this package registers every table with `Base.metadata`
(used by `init_models()` and Alembic autogenerate).
"""

from buglab.models.assignment import ScientistBug
from buglab.models.bug import Bug
from buglab.models.scientist import Scientist
from buglab.models.session import UserSession
from buglab.models.user import User

__all__ = ["Bug", "Scientist", "ScientistBug", "User", "UserSession"]
