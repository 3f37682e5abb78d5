import logging
from sqlalchemy import text
from tenacity import retry, stop_after_attempt, wait_fixed
from database.database import engine, create_tables
from database.models import Base

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def init_db():
    logger.info("Initializing database...")
    try:
        # Fail fast (and retry) while the database is still starting up
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))

        create_tables()
        logger.info(f"Tables created or verified: {', '.join(sorted(Base.metadata.tables))}")

    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
