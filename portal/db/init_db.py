from portal.db.base import Base
from portal.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
