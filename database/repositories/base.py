from sqlalchemy.orm import Session


class BaseRepository:
    """Holds the unit of work's Session. Repositories never commit; ledger_uow() does."""

    def __init__(self, db: Session):
        self.db = db
