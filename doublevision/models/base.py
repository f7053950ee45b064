from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base
from doublevision.utils.context import utcnow

Base = declarative_base()


class BaseModel(Base):
    __abstract__ = True
    
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
