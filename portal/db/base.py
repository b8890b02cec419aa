from portal.db.base_class import Base  # noqa: F401

# import models so SQLAlchemy registers them on Base.metadata
from portal.models import assessment, category, submission, user  # noqa: F401
