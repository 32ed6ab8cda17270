from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    # связь с заказами
    orders = relationship("Order", back_populates="user")
