# app/api/__init__.py
# This file makes the api directory a Python package.

from . import credits
from . import exchange
from . import matching
from . import notification
from . import presence
from . import review
from . import skill
from . import user_skill
from . import users

__all__ = [
    "credits",
    "exchange",
    "matching",
    "notification",
    "presence",
    "review",
    "skill",
    "user_skill",
    "users",
]
