from database.repositories.base import BaseRepository
from database.repositories.contest import ContestRepository
from database.repositories.submission import SubmissionRepository, GuestSubmissionRepository
from database.repositories.precedence import PrecedenceRepository
from database.repositories.standings import StandingsRepository
from database.repositories.settlement import SettlementRepository
from database.repositories.user import UserRepository

__all__ = [
    'BaseRepository',
    'ContestRepository',
    'SubmissionRepository',
    'GuestSubmissionRepository',
    'PrecedenceRepository',
    'StandingsRepository',
    'SettlementRepository',
    'UserRepository',
]
