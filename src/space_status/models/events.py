"""
Event Models
============

Pydantic models for the forum event pipeline.

Input Contract (Discourse category listing):
    {
        "topic_list": {
            "topics": [
                {"id": 42, "title": "12/05/2024 18:00 - 20:00 Workshop", "slug": "workshop"},
                ...
            ]
        }
    }

Only id, title and slug are read; every other topic field is ignored.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TopicSourceRecord(BaseModel):
    """Raw forum topic metadata. Consumed immediately by extraction."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Numeric topic id")
    title: str = Field(..., description="Topic title encoding date/time")
    slug: str = Field(..., description="URL slug of the topic")


class TopicList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    topics: List[TopicSourceRecord] = Field(default_factory=list)


class TopicListPayload(BaseModel):
    """Top-level forum response. A payload without topic_list is rejected."""

    model_config = ConfigDict(extra="ignore")

    topic_list: TopicList


class EventRecord(BaseModel):
    """
    Structured event extracted from a topic title.

    Attributes:
        title: Free text following the date/time tokens
        date: DD/MM/YYYY as written in the title
        begin: HH:MM start time
        end: HH:MM end time, or "" when the title has no range
        url: Link to the forum topic
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "title": "Lockpicking Workshop",
                "date": "12/05/2024",
                "begin": "18:00",
                "end": "20:00",
                "url": "https://community.lambdaspace.gr/t/lockpicking-night/42",
            }
        },
    )

    title: str = Field(default="", description="Event title")
    date: str = Field(..., min_length=1, description="DD/MM/YYYY")
    begin: str = Field(..., min_length=1, description="HH:MM start")
    end: str = Field(default="", description="HH:MM end, may be empty")
    url: str = Field(..., description="Forum topic URL")


class EventsResponse(BaseModel):
    """Payload for the /events route."""

    events: List[EventRecord] = Field(default_factory=list)
