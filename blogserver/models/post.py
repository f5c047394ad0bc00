# blogserver/models/post.py

from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from . import Base


PUBLISHED = "published"


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String, index=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, index=True, default=PUBLISHED, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    category = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
