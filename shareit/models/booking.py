from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from shareit.db.session import Base

class BookingRow(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # naive UTC, half-open [start_date, end_date)
    start_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime, index=True)

    item_id: Mapped[int] = mapped_column(Integer, index=True)
    booker_id: Mapped[int] = mapped_column(Integer, index=True)

    status: Mapped[str] = mapped_column(String(20), default="WAITING", index=True)  # WAITING, APPROVED, REJECTED, CANCELED
