from .base import Base
from .user import User
from .contest import Contest
from .submission import Submission
from .guest_submission import GuestSubmission, VALIDATED_STATUSES
from .precedence import PickSetPrecedence
from .settlement import SettlementStatus

__all__ = [
    'Base',
    'User',
    'Contest',
    'Submission',
    'GuestSubmission',
    'VALIDATED_STATUSES',
    'PickSetPrecedence',
    'SettlementStatus',
]
