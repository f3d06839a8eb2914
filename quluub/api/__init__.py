# quluub/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import auth
from . import bank
from . import complaints
from . import counselors
from . import messages
from . import notifications
from . import payment
from . import connection_requests
from . import reviews
from . import sessions
from . import users
from . import video
from . import wallet

__all__ = [
    "auth",
    "users",
    "counselors",
    "sessions",
    "reviews",
    "connection_requests",
    "wallet",
    "bank",
    "payment",
    "video",
    "messages",
    "complaints",
    "notifications",
    "admin",
]
