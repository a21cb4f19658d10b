# wayfare/domains/agencies/models.py
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from wayfare.db.models import Agency


class SocialMedia(BaseModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None


class AgencyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    tax_id: Optional[str] = None


class AgencyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    tax_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_has_update(self) -> "AgencyUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("Agency name cannot be cleared")
        return self


class AgencyResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    logo: Optional[str]
    website: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    social_media: Optional[SocialMedia]
    tax_id: Optional[str]
    owner_id: str
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_agency(cls, agency: Agency) -> "AgencyResponse":
        return cls(
            id=agency.id,
            name=agency.name,
            description=agency.description,
            logo=agency.logo,
            website=agency.website,
            email=agency.email,
            phone=agency.phone,
            social_media=(
                SocialMedia(**agency.social_media) if agency.social_media else None
            ),
            tax_id=agency.tax_id,
            owner_id=agency.owner_id,
            created_at=agency.created_at.isoformat() if agency.created_at else None,
            updated_at=agency.updated_at.isoformat() if agency.updated_at else None,
        )


class CreateAgencyResponse(BaseModel):
    agency: AgencyResponse
    role: str


class UserAgencyResponse(AgencyResponse):
    role: str


class AgencyStats(BaseModel):
    total_members: int
    pending_invitations: int
