"""Create all tables. Run on app startup."""
import logging

from sqlalchemy.engine import Engine

from app.db.base import Base
from app.models import customer, entry  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")
