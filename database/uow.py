import contextlib
import logging

from database.database import SessionLocal
from database.repository import LedgerRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def ledger_uow(read_only: bool = False):
    """Per-unit-of-work transaction scope.

    Yields a LedgerRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. A read_only unit of work is
    rolled back on exit instead of committed.

    One unit of work covers one chunk of one contest's resolution, one
    arbitration decision, or one standings read, never more.

    Usage:
        with ledger_uow() as repo:
            contest = repo.contests.get_for_update(contest_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = SessionLocal()
    try:
        yield LedgerRepository(session)
        if read_only:
            session.rollback()
        else:
            session.commit()
    except Exception as e:
        logger.debug(f"Rolling back unit of work after {e.__class__.__name__}: {e}")
        session.rollback()
        raise
    finally:
        session.close()
