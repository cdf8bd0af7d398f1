"""SQLAlchemy model for registered button and screen devices."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticket_desk.db.session import Base


class Device(Base):
    """A physical button or display screen identified by a static bearer token.

    The device name doubles as the desk name for ticket calls.
    """

    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    token: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
