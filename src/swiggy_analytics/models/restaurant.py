from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    r_id = Column(Integer, primary_key=True, index=True)
    r_name = Column(String(128), nullable=False)
    cuisine = Column(String(64), nullable=True)  # Italian, Chinese, Indian и т.д.

    orders = relationship("Order", back_populates="restaurant")
