from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from shareit.db.session import Base

class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    email: Mapped[str] = mapped_column(String(512), unique=True, index=True)
