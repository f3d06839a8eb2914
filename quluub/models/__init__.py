# quluub/models/__init__.py
# Import models in dependency order
from .user import User
from .counselor import Counselor
from .session import Session
from .review import Review
from .wallet import Wallet, Transaction
from .bank import BankAccount, Withdrawal
from .request import ConnectionRequest
from .complaint import Complaint
from .message import Message
from .notification import Notification

__all__ = [
    "User",
    "Counselor",
    "Session",
    "Review",
    "Wallet",
    "Transaction",
    "BankAccount",
    "Withdrawal",
    "ConnectionRequest",
    "Complaint",
    "Message",
    "Notification",
]
