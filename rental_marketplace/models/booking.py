"""
Booking models.
Orders and rooms are persisted but not yet exposed through the API.
"""

from sqlalchemy import String, Text, Integer, Numeric, Date
from sqlalchemy.orm import Mapped, mapped_column
from rental_marketplace.database import Base
from datetime import date
from decimal import Decimal
from typing import Optional


class Order(Base):
    """Reservation of a property for a date range."""

    __tablename__ = "orders"

    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending", index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)


class Room(Base):
    """Bookable room inventory."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_sale: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
