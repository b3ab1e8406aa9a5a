# File: camswitch/core/database/init_db.py

import logging
from sqlalchemy_utils import database_exists, create_database

from camswitch.core.config.settings import settings
from camswitch.core.database.base import Base
from camswitch.core.database.connection import engine

logger = logging.getLogger(__name__)


def register_models():
    """Imports every SQL model so it is attached to Base.metadata."""
    import camswitch.features.rules.data.sql_models  # noqa: F401
    import camswitch.features.sessions.data.sql_models  # noqa: F401
    import camswitch.features.cameras.data.sql_models  # noqa: F401
    import camswitch.features.switching.data.sql_models  # noqa: F401


def init_db():
    """Creates the database (if missing) and all tables."""
    settings.ensure_dirs()
    if not database_exists(engine.url):
        logger.info(f"Creating database {engine.url.database}")
        create_database(engine.url)

    register_models()
    Base.metadata.create_all(bind=engine)
