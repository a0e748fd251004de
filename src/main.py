import logging
import os
import time

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from src.api.routes.routes import router
from src.infrastructure.db.session import engine
from src.infrastructure.db.models import Base

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DB_CONNECT_MAX_RETRIES = int(os.getenv("DB_CONNECT_MAX_RETRIES", "30"))
DB_CONNECT_RETRY_DELAY = float(os.getenv("DB_CONNECT_RETRY_DELAY", "1.5"))

app = FastAPI(title="Board Game Cafe Engine")
app.include_router(router)

logger = logging.getLogger(__name__)


def _wait_for_database(max_retries: int, retry_delay: float) -> None:
    target = engine.url.render_as_string(hide_password=True)

    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError:
            if attempt >= max_retries:
                logger.exception("Giving up on database after %s attempts. url=%s", attempt, target)
                raise
            logger.warning(
                "Database unavailable (attempt %s/%s), retrying in %.1fs. url=%s",
                attempt,
                max_retries,
                retry_delay,
                target,
            )
            time.sleep(retry_delay)
        else:
            logger.info("Connected to database. dialect=%s url=%s", engine.dialect.name, target)
            return


@app.on_event("startup")
def on_startup() -> None:
    _wait_for_database(DB_CONNECT_MAX_RETRIES, DB_CONNECT_RETRY_DELAY)
    # Tables only; there are no migrations to run.
    Base.metadata.create_all(bind=engine)
