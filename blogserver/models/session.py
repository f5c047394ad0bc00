# blogserver/models/session.py

from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from . import Base


class LoginSession(Base):
    """
    Server-side login session. The browser only holds session_id.
    """
    __tablename__ = "login_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(Integer, index=True, nullable=False)
    username = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
