from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderDetail(Base):
    __tablename__ = "order_details"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False)
    f_id = Column(Integer, ForeignKey("food.f_id"), nullable=False)

    # связи
    order = relationship("Order", back_populates="details")
    food = relationship("Food", back_populates="order_details")
