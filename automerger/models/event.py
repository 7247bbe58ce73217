"""Structural schema for community event entries.

Only well-formedness is checked here: required fields, consistent date
ranges and sane coordinates. Presentation concerns (grouping, time zone
display) belong to the site, not to the automerger.
"""

from typing import Literal, Optional, Union

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    """Geographic position of an on-site event."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class PhysicalLocation(BaseModel):
    """Where an on-site event takes place."""

    model_config = ConfigDict(extra="allow")

    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    coordinates: Optional[Coordinates] = None


class EventDate(BaseModel):
    """Start and end of an event, both with an explicit UTC offset."""

    start: AwareDatetime
    end: AwareDatetime

    @model_validator(mode="after")
    def end_after_start(self) -> "EventDate":
        if self.end <= self.start:
            raise ValueError("event end must be after its start")
        return self


class Event(BaseModel):
    """One event entry as stored in the content repository."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    title: str = Field(min_length=1)
    date: EventDate
    location: Union[Literal["virtual"], PhysicalLocation]
    url: Optional[str] = None
    description: Optional[str] = None
    moderators: list[str] = Field(default_factory=list)
    spoken_language: Optional[str] = Field(default=None, alias="spokenLanguage")

    @property
    def identity(self) -> str:
        """Key used to detect duplicate entries."""
        if self.id:
            return self.id
        return f"{self.title.strip().lower()}@{self.date.start.isoformat()}"
