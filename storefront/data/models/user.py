from sqlalchemy import Column, DateTime, Integer, String
from datetime import datetime, timezone

from storefront.data.database import Base

class UserModel(Base):
    __tablename__ = "users"

    # ids come from the identity provider, never generated here
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
