import logging

from maternacare.config import settings
from maternacare.crud import crud_admin
from maternacare.database import Base, SessionLocal, engine
import maternacare.models  # registers every model on Base.metadata

logger = logging.getLogger(__name__)


def seed_admin(db) -> None:
    """Create the first administrator from INITIAL_ADMIN_* settings, once."""
    if not settings.INITIAL_ADMIN_NAME or not settings.INITIAL_ADMIN_PASSWORD:
        return
    if crud_admin.get_by_full_name(db, name=settings.INITIAL_ADMIN_NAME):
        return
    parts = settings.INITIAL_ADMIN_NAME.split()
    if len(parts) < 2:
        raise ValueError("INITIAL_ADMIN_NAME needs at least a first and a last name")
    crud_admin.create_admin(
        db,
        first_name=parts[0],
        middle_name=" ".join(parts[1:-1]) or None,
        last_name=parts[-1],
        password=settings.INITIAL_ADMIN_PASSWORD,
    )
    logger.info(f"Initial admin created: {settings.INITIAL_ADMIN_NAME}")


def main():
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully")
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()

if __name__ == "__main__":
    main()
