"""Generate database sessions"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from chatchess.db.schema import Base

logger = logging.getLogger(__name__)


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Connect to the database and ensure all tables are created."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine)
