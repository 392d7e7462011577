"""Pension model - recurring contracts tracked by the office."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric

from ..database import Base

PENSION_STATUSES = ("active", "inactive")


class Pension(Base):
    """A pension contract for one person at one company."""

    __tablename__ = "pensions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_name = Column(String, nullable=False)
    company_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default="active", index=True)  # active, inactive
    expiration_date = Column(Date, nullable=False, index=True)
    monthly_amount = Column(Numeric(10, 2), nullable=True)
    lugar = Column(String, nullable=False, default="stw")  # stw, nvbola
    local = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_renewal = Column(DateTime, nullable=True)

    @property
    def display_name(self) -> str:
        return f"{self.person_name} - {self.company_name}"
