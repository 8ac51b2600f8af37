"""Availability model definitions."""

from datetime import date

from pydantic import BaseModel, Field


class AvailabilityDay(BaseModel):
    """One calendar day in the booking window. Derived, never stored."""

    date: date
    booked: bool
    open: bool = True
    display_label: str = Field(alias='displayLabel')

    class Config:
        populate_by_name = True


class AvailabilityResponse(BaseModel):
    days: list[AvailabilityDay]
