"""Seed the syndication settings row on first startup.

Idempotent: an existing row is never touched, so edits made through the
settings API survive restarts.
"""

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def ensure_default_settings(db: Session) -> bool:
    """Create the default settings row if it is missing.

    Args:
        db: An open SQLAlchemy session.

    Returns:
        True if the row was created, False if it already existed.
    """
    from ..repositories.syndication_repository import SyndicationRepository

    repo = SyndicationRepository(db)
    if repo.get_settings() is not None:
        logger.debug("Syndication settings present, skipping seed")
        return False

    repo.create_default_settings()
    db.commit()
    logger.info("Created default syndication settings")
    return True
