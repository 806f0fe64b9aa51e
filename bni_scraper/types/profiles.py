"""Profile data models for the directory listing and member profile pages."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class DashboardProfile(BaseModel):
    """Summary row for one member on the directory listing page."""

    name: str = Field(default="")
    profile_link: str = Field(default="", alias="profileLink")
    chapter: str = Field(default="")
    company: str = Field(default="")
    city: str = Field(default="")
    industry: str = Field(default="")
    connect: str = Field(default="+", description="Connect button indicator")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def strip_whitespace(cls, value: Any) -> str:
        return _clean(value)


class ProfileRecord(BaseModel):
    """Contact fields read from a member's profile page."""

    name: str = Field(default="")
    phone1: str = Field(default="")
    phone2: str = Field(default="")
    email: str = Field(default="")
    website: str = Field(default="")
    address: str = Field(default="")
    city: str = Field(default="")
    postal_code: str = Field(default="", alias="postalCode")
    country: str = Field(default="")
    industry: str = Field(default="")
    about: str = Field(default="")
    keywords: str = Field(default="")
    other: str = Field(default="")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def strip_whitespace(cls, value: Any) -> str:
        return _clean(value)

    @property
    def is_empty(self) -> bool:
        """True when the page produced no field at all."""
        return not any(self.model_dump().values())


class MergedProfile(BaseModel):
    """Listing summary joined with the detailed profile, one export row."""

    name: str = ""
    profile_link: str = ""
    chapter: str = ""
    company: str = ""
    city: str = ""
    industry_tag: str = ""
    connect: str = "+"
    detailed_name: str = ""
    phone_no: str = ""
    detailed_email: str = ""
    website: str = ""
    phone_no_2: str = ""
    detailed_address: str = ""
    detailed_city: str = ""
    postal_code: str = ""
    country: str = ""
    detailed_industry: str = ""
    about: str = ""
    keyword: str = ""
    other: str = ""

    @classmethod
    def from_parts(
        cls,
        summary: Optional[DashboardProfile],
        record: Optional[ProfileRecord],
        url: str = "",
    ) -> "MergedProfile":
        """Build an export row from a listing row and an optional record."""
        summary = summary or DashboardProfile(profile_link=url)
        record = record or ProfileRecord()
        return cls(
            name=summary.name,
            profile_link=summary.profile_link or url,
            chapter=summary.chapter,
            company=summary.company,
            city=summary.city,
            industry_tag=summary.industry,
            connect=summary.connect or "+",
            detailed_name=record.name,
            phone_no=record.phone1,
            detailed_email=record.email,
            website=record.website,
            phone_no_2=record.phone2,
            detailed_address=record.address,
            detailed_city=record.city,
            postal_code=record.postal_code,
            country=record.country,
            detailed_industry=record.industry,
            about=record.about,
            keyword=record.keywords,
            other=record.other,
        )
