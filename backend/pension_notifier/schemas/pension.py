"""Pension schemas for API."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Literal
from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits the camelCase field names used by the web client."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class PensionCreate(CamelModel):
    """Schema for creating a new pension. New pensions are always active."""
    person_name: str = Field(..., min_length=1, max_length=255)
    company_name: str = Field(..., min_length=1, max_length=255)
    expiration_date: date
    monthly_amount: Optional[Decimal] = Field(None, ge=0)
    lugar: str = Field(default="stw", min_length=1)
    local: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


# Columns that are NOT NULL in the pensions table
REQUIRED_FIELDS = ("person_name", "company_name", "status", "expiration_date", "lugar")


class PensionUpdate(CamelModel):
    """Schema for editing a pension."""
    person_name: Optional[str] = Field(None, min_length=1, max_length=255)
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[Literal["active", "inactive"]] = None
    expiration_date: Optional[date] = None
    monthly_amount: Optional[Decimal] = Field(None, ge=0)
    lugar: Optional[str] = Field(None, min_length=1)
    local: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_required_not_null(self):
        nulled = [
            name for name in REQUIRED_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class PensionRenew(CamelModel):
    """Renew with an explicit date or a number of months from today."""
    expiration_date: Optional[date] = None
    months: Optional[int] = Field(None, ge=1, le=120)

    @model_validator(mode="after")
    def check_one_given(self):
        if self.expiration_date is None and self.months is None:
            raise ValueError("expirationDate or months is required")
        return self


class PensionResponse(CamelModel):
    """Schema for pension in API responses."""
    id: int
    person_name: str
    company_name: str
    status: str
    expiration_date: date
    monthly_amount: Optional[Decimal] = None
    lugar: str
    local: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_renewal: Optional[datetime] = None


class ZoneBreakdown(BaseModel):
    stw: int = 0
    nvbola: int = 0
    total: int = 0


class RevenueBreakdown(BaseModel):
    stw: Decimal = Decimal("0")
    nvbola: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


class PensionStats(CamelModel):
    """Dashboard totals, split by zone."""
    total_active: ZoneBreakdown
    total_inactive: ZoneBreakdown
    total_revenue: RevenueBreakdown
