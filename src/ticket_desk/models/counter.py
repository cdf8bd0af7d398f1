"""Singleton row holding what the displays currently show."""

from typing import Final

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticket_desk.db.session import Base

COUNTER_ROW_ID: Final[int] = 1


class CounterState(Base):
    """Current ticket number and the desk that called it.

    Only one row (``id == 1``) ever exists. It is mutated exclusively by the
    queue ledger, in the same transaction as the matching history event.
    """

    __tablename__ = "counter_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=COUNTER_ROW_ID)
    counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_desk: Mapped[str] = mapped_column(Text, nullable=False, default="None")
