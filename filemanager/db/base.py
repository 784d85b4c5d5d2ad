# Import every model so Base.metadata knows about all tables
from filemanager.db.session import Base  # noqa: F401
from filemanager.models.file import File  # noqa: F401
from filemanager.models.user import User  # noqa: F401
