"""
SpaceAPI Descriptor Schema
==========================

Pydantic model of the static SpaceAPI document loaded at startup.

Every field has a default so that a zero-valued descriptor is valid. The
service keeps running with it when the descriptor file cannot be read.
"""

from typing import List

from pydantic import BaseModel, Field


class Location(BaseModel):
    address: str = ""
    lon: float = 0.0
    lat: float = 0.0


class State(BaseModel):
    open: bool = False
    lastchange: int = Field(default=0, ge=0)


class Contact(BaseModel):
    email: str = ""
    irc: str = ""
    ml: str = ""
    twitter: str = ""
    facebook: str = ""
    foursquare: str = ""


class PeopleNowPresent(BaseModel):
    value: int = Field(default=0, ge=0)


class Sensors(BaseModel):
    people_now_present: List[PeopleNowPresent] = Field(default_factory=list)


class Cache(BaseModel):
    schedule: str = ""


class SpaceDescriptor(BaseModel):
    """
    SpaceAPI document.

    The `state` and `sensors` sections only seed the initial occupancy;
    the live values are filled in by StateStore when serving.
    """

    api: str = ""
    space: str = ""
    logo: str = ""
    url: str = ""
    location: Location = Field(default_factory=Location)
    state: State = Field(default_factory=State)
    contact: Contact = Field(default_factory=Contact)
    sensors: Sensors = Field(default_factory=Sensors)
    issue_report_channels: List[str] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    cache: Cache = Field(default_factory=Cache)
