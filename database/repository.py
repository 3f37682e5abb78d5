import logging

from sqlalchemy.orm import Session

from database.repositories import (
    ContestRepository,
    SubmissionRepository,
    GuestSubmissionRepository,
    PrecedenceRepository,
    StandingsRepository,
    SettlementRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class LedgerRepository:
    """
    Facade over the per-table repositories, all sharing one Session.

    Handed out by ledger_uow(); services reach the tables they need through
    its attributes (repo.contests, repo.submissions, ...).
    """

    def __init__(self, db: Session):
        self.db = db
        self.contests = ContestRepository(db)
        self.submissions = SubmissionRepository(db)
        self.guest_submissions = GuestSubmissionRepository(db)
        self.precedence = PrecedenceRepository(db)
        self.standings = StandingsRepository(db)
        self.settlement = SettlementRepository(db)
        self.users = UserRepository(db)

    def channel(self, name: str):
        """Pick repository for a submission channel ('identified' or 'guest')."""
        if name == 'identified':
            return self.submissions
        if name == 'guest':
            return self.guest_submissions
        raise ValueError(f"Unknown submission channel: {name}")
