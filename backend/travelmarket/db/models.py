from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Index, String
from sqlmodel import Field, Relationship, SQLModel

# Enums
class UserRole(str, Enum):
    TRAVELER = "traveler"
    AGENCY = "agency"

class PreferenceStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class PackageType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    BUDGET = "budget"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampedModel(SQLModel):
    """Integer surrogate key and insert timestamp shared by every table"""

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )


# Models
class User(TimestampedModel, table=True):
    __tablename__ = "users"

    username: str = Field(unique=True, nullable=False, max_length=50)
    password: str = Field(nullable=False, max_length=255, description="bcrypt hash")
    email: str = Field(unique=True, nullable=False, max_length=255)
    full_name: str = Field(nullable=False, max_length=200)
    role: str = Field(
        default=UserRole.TRAVELER.value,
        sa_type=String(20),
        nullable=False,
    )

    # Relationships
    agency: Optional["Agency"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"uselist": False},
    )
    travel_preferences: List["TravelPreference"] = Relationship(back_populates="user")
    sent_messages: List["Message"] = Relationship(
        back_populates="sender",
        sa_relationship_kwargs={"foreign_keys": "Message.sender_id"},
    )
    received_messages: List["Message"] = Relationship(
        back_populates="receiver",
        sa_relationship_kwargs={"foreign_keys": "Message.receiver_id"},
    )

    @property
    def is_agency(self) -> bool:
        return self.role == UserRole.AGENCY.value


class Agency(TimestampedModel, table=True):
    __tablename__ = "agencies"

    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    company_name: str = Field(nullable=False, max_length=200)
    description: Optional[str] = None
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    verified: bool = Field(default=False)

    user: Optional[User] = Relationship(back_populates="agency")
    travel_packages: List["TravelPackage"] = Relationship(back_populates="agency")


class Destination(TimestampedModel, table=True):
    __tablename__ = "destinations"

    name: str = Field(nullable=False, max_length=200)
    country: str = Field(nullable=False, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = None
    best_time_to_visit: Optional[str] = None
    avg_temperature: Optional[str] = None
    beach_season: Optional[str] = None
    rainy_season: Optional[str] = None

    travel_preferences: List["TravelPreference"] = Relationship(back_populates="destination")


class TravelPreference(TimestampedModel, table=True):
    __tablename__ = "travel_preferences"

    __table_args__ = (
        Index('idx_travel_preferences_user_id', 'user_id'),
        Index('idx_travel_preferences_status', 'status'),
    )

    user_id: int = Field(foreign_key="users.id", nullable=False)
    destination_id: Optional[int] = Field(default=None, foreign_key="destinations.id")
    additional_destination: Optional[str] = None
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    travelers: int = Field(default=1)
    budget: Optional[int] = None
    special_requests: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Free-form trip preferences (interests, accommodation style, ...)"
    )
    status: str = Field(
        default=PreferenceStatus.PENDING.value,
        sa_type=String(20),
        nullable=False,
    )

    user: Optional[User] = Relationship(back_populates="travel_preferences")
    destination: Optional[Destination] = Relationship(back_populates="travel_preferences")
    travel_packages: List["TravelPackage"] = Relationship(back_populates="preference")


class TravelPackage(TimestampedModel, table=True):
    __tablename__ = "travel_packages"

    __table_args__ = (
        Index('idx_travel_packages_agency_id', 'agency_id'),
        Index('idx_travel_packages_preference_id', 'preference_id'),
    )

    agency_id: int = Field(foreign_key="agencies.id", nullable=False)
    preference_id: Optional[int] = Field(default=None, foreign_key="travel_preferences.id")
    title: str = Field(nullable=False, max_length=200)
    description: Optional[str] = None
    price: int = Field(nullable=False)
    price_per_person: bool = Field(default=True)
    accommodation: Optional[str] = None
    transportation: Optional[str] = None
    meals: Optional[str] = None
    activities: Optional[str] = None
    additional_info: Optional[str] = None
    package_type: str = Field(
        default=PackageType.STANDARD.value,
        sa_type=String(20),
        nullable=False,
    )

    agency: Optional[Agency] = Relationship(back_populates="travel_packages")
    preference: Optional[TravelPreference] = Relationship(back_populates="travel_packages")


class Message(TimestampedModel, table=True):
    __tablename__ = "messages"

    __table_args__ = (
        Index('idx_messages_participants', 'sender_id', 'receiver_id'),
    )

    sender_id: int = Field(foreign_key="users.id", nullable=False)
    receiver_id: int = Field(foreign_key="users.id", nullable=False)
    content: str = Field(nullable=False)
    read: bool = Field(default=False)

    sender: Optional[User] = Relationship(
        back_populates="sent_messages",
        sa_relationship_kwargs={"foreign_keys": "Message.sender_id"},
    )
    receiver: Optional[User] = Relationship(
        back_populates="received_messages",
        sa_relationship_kwargs={"foreign_keys": "Message.receiver_id"},
    )
