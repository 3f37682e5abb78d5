from core.precedence.rules import PrecedenceDecision, decide_active_channel, IDENTIFIED, GUEST
from core.precedence.service import PrecedenceService

__all__ = [
    'PrecedenceDecision',
    'decide_active_channel',
    'PrecedenceService',
    'IDENTIFIED',
    'GUEST',
]
