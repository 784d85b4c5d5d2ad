from sqlalchemy import Column, Integer, String
from filemanager.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True, index=True)
    username = Column(String(100), nullable=False)

    # bcrypt hash, never the plain password
    password = Column(String(255), nullable=False)
