from sqlalchemy import String, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from shareit.db.session import Base

class ItemRow(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(String(1000), default="")
    available: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    owner_id: Mapped[int] = mapped_column(Integer, index=True)
    request_id: Mapped[int] = mapped_column(Integer, nullable=True, index=True)  # answered item request, if any
