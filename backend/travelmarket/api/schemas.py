from typing import Any, Dict, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from travelmarket.db.models import PackageType, PreferenceStatus, UserRole

# INTEGER columns are 32-bit signed on PostgreSQL
MAX_INT = 2**31 - 1


class CamelModel(BaseModel):
    """JSON keys are camelCase on the wire; snake_case is accepted on input"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class StatusMessage(BaseModel):
    message: str

# ===== AUTH / USER SCHEMAS =====

class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters long")
    full_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = Field(default=UserRole.TRAVELER, validate_default=True)

    @field_validator('username', 'full_name')
    @classmethod
    def strip_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

class UserSummary(CamelModel):
    """Directory entry; no profile details"""
    id: int
    username: str
    email: str

class UserRead(CamelModel):
    id: int
    username: str
    email: str
    full_name: str
    role: UserRole
    created_at: datetime

# ===== AGENCY SCHEMAS =====

class AgencyCreate(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = ""
    website_url: Optional[str] = ""
    phone_number: Optional[str] = ""

class AgencyUpdate(CamelModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    website_url: Optional[str] = None
    phone_number: Optional[str] = None

class AgencyRead(CamelModel):
    id: int
    user_id: int
    company_name: str
    description: Optional[str] = None
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    verified: bool
    created_at: datetime

# ===== DESTINATION SCHEMAS =====

class DestinationRead(CamelModel):
    id: int
    name: str
    country: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    best_time_to_visit: Optional[str] = None
    avg_temperature: Optional[str] = None
    beach_season: Optional[str] = None
    rainy_season: Optional[str] = None
    created_at: datetime

class SeedResult(BaseModel):
    message: str
    inserted: int

# ===== TRAVEL PREFERENCE SCHEMAS =====

class TravelPreferenceCreate(CamelModel):
    destination_id: Optional[int] = Field(None, ge=1, le=MAX_INT)
    additional_destination: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    travelers: int = Field(1, ge=1, le=MAX_INT)
    budget: Optional[int] = Field(None, ge=0, le=MAX_INT)
    special_requests: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None

class TravelPreferenceUpdate(CamelModel):
    additional_destination: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    travelers: Optional[int] = Field(None, ge=1, le=MAX_INT)
    budget: Optional[int] = Field(None, ge=0, le=MAX_INT)
    special_requests: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    status: Optional[PreferenceStatus] = None

class TravelPreferenceRead(CamelModel):
    id: int
    user_id: int
    destination_id: Optional[int] = None
    additional_destination: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    travelers: int
    budget: Optional[int] = None
    special_requests: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    status: PreferenceStatus
    created_at: datetime

# ===== TRAVEL PACKAGE SCHEMAS =====

class TravelPackageCreate(CamelModel):
    preference_id: Optional[int] = Field(None, ge=1, le=MAX_INT)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: int = Field(..., ge=0, le=MAX_INT)
    price_per_person: bool = True
    accommodation: Optional[str] = None
    transportation: Optional[str] = None
    meals: Optional[str] = None
    activities: Optional[str] = None
    additional_info: Optional[str] = None
    package_type: PackageType = Field(default=PackageType.STANDARD, validate_default=True)

class TravelPackageUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0, le=MAX_INT)
    price_per_person: Optional[bool] = None
    accommodation: Optional[str] = None
    transportation: Optional[str] = None
    meals: Optional[str] = None
    activities: Optional[str] = None
    additional_info: Optional[str] = None
    package_type: Optional[PackageType] = None

class TravelPackageRead(CamelModel):
    id: int
    agency_id: int
    preference_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    price: int
    price_per_person: bool
    accommodation: Optional[str] = None
    transportation: Optional[str] = None
    meals: Optional[str] = None
    activities: Optional[str] = None
    additional_info: Optional[str] = None
    package_type: PackageType
    created_at: datetime

# ===== MESSAGE SCHEMAS =====

class MessageCreate(CamelModel):
    receiver_id: int = Field(..., ge=1, le=MAX_INT)
    content: str = Field(..., min_length=1, max_length=5000)

class MessageRead(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    read: bool
    created_at: datetime
