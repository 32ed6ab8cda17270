from sqlalchemy import Column, Integer, String, Numeric
from sqlalchemy.orm import relationship
from ..db.base import Base


class Food(Base):
    __tablename__ = "food"

    f_id = Column(Integer, primary_key=True, index=True)
    f_name = Column(String(128), nullable=False)
    price = Column(Numeric(10, 2), nullable=True)  # цена в меню

    # связь с OrderDetail
    order_details = relationship("OrderDetail", back_populates="food")
