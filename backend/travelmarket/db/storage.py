"""
Storage access layer: one method per entity operation over the relational schema.

``Storage`` is the interface route handlers depend on; ``DatabaseStorage`` is
the SQLAlchemy implementation. Every method runs in its own session, so each
write commits independently of any other.
"""

import logging
from typing import Any, Iterable, List, Optional, Protocol, Type, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlmodel import SQLModel

from travelmarket.core.errors import ConstraintViolation
from travelmarket.db.models import (
    Agency, Destination, Message, TravelPackage, TravelPreference, User
)
from travelmarket.db.seed import SEED_DESTINATIONS
from travelmarket.db.session import DatabaseManager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

# Constraint violations, and values the driver cannot bind or the column cannot hold
REJECTED_WRITES = (DBAPIError, OverflowError)


class Storage(Protocol):
    # Users
    async def get_user(self, user_id: int) -> Optional[User]: ...
    async def get_user_by_username(self, username: str) -> Optional[User]: ...
    async def get_user_by_email(self, email: str) -> Optional[User]: ...
    async def get_all_users(self) -> List[User]: ...
    async def get_users_by_ids(self, user_ids: Iterable[int]) -> List[User]: ...
    async def create_user(self, **fields: Any) -> User: ...
    async def update_user(self, user_id: int, **fields: Any) -> Optional[User]: ...

    # Agencies
    async def get_agency(self, agency_id: int) -> Optional[Agency]: ...
    async def get_agency_by_user_id(self, user_id: int) -> Optional[Agency]: ...
    async def get_all_agencies(self) -> List[Agency]: ...
    async def create_agency(self, **fields: Any) -> Agency: ...
    async def update_agency(self, agency_id: int, **fields: Any) -> Optional[Agency]: ...

    # Destinations
    async def get_destination(self, destination_id: int) -> Optional[Destination]: ...
    async def get_all_destinations(self) -> List[Destination]: ...
    async def create_destination(self, **fields: Any) -> Destination: ...
    async def update_destination(self, destination_id: int, **fields: Any) -> Optional[Destination]: ...
    async def seed_destinations(self) -> int: ...

    # Travel preferences
    async def get_travel_preference(self, preference_id: int) -> Optional[TravelPreference]: ...
    async def get_travel_preferences_by_user_id(self, user_id: int) -> List[TravelPreference]: ...
    async def get_all_travel_preferences(self) -> List[TravelPreference]: ...
    async def create_travel_preference(self, **fields: Any) -> TravelPreference: ...
    async def update_travel_preference(self, preference_id: int, **fields: Any) -> Optional[TravelPreference]: ...

    # Travel packages
    async def get_travel_package(self, package_id: int) -> Optional[TravelPackage]: ...
    async def get_travel_packages_by_agency_id(self, agency_id: int) -> List[TravelPackage]: ...
    async def get_travel_packages_by_preference_id(self, preference_id: int) -> List[TravelPackage]: ...
    async def create_travel_package(self, **fields: Any) -> TravelPackage: ...
    async def update_travel_package(self, package_id: int, **fields: Any) -> Optional[TravelPackage]: ...

    # Messages
    async def get_message(self, message_id: int) -> Optional[Message]: ...
    async def get_messages_between_users(self, user1_id: int, user2_id: int) -> List[Message]: ...
    async def get_messages_by_user_id(self, user_id: int) -> List[Message]: ...
    async def create_message(self, **fields: Any) -> Message: ...
    async def mark_message_as_read(self, message_id: int) -> Optional[Message]: ...


class DatabaseStorage:
    """Relational implementation of ``Storage``"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    # ===== GENERIC HELPERS =====

    async def _get(self, model: Type[ModelT], ident: int) -> Optional[ModelT]:
        async with self.db.get_session() as session:
            return await session.get(model, ident)

    async def _first(self, statement) -> Optional[Any]:
        async with self.db.get_session() as session:
            result = await session.execute(statement)
            return result.scalars().first()

    async def _all(self, statement) -> List[Any]:
        async with self.db.get_session() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def _commit(self, session, what: str) -> None:
        try:
            await session.commit()
        except OperationalError:
            # connection trouble is a server fault, not bad input
            await session.rollback()
            raise
        except REJECTED_WRITES as e:
            await session.rollback()
            logger.warning(f"Rejected {what}: {getattr(e, 'orig', e)}")
            raise ConstraintViolation() from e

    async def _insert(self, instance: ModelT) -> ModelT:
        async with self.db.get_session() as session:
            session.add(instance)
            await self._commit(session, f"{type(instance).__name__} insert")
            await session.refresh(instance)
            logger.info(f"Created {type(instance).__name__} {instance.id}")
            return instance

    async def _update(self, model: Type[ModelT], ident: int, fields: dict) -> Optional[ModelT]:
        changes = {k: v for k, v in fields.items() if v is not None}
        async with self.db.get_session() as session:
            instance = await session.get(model, ident)
            if instance is None:
                return None
            for key, value in changes.items():
                setattr(instance, key, value)
            await self._commit(session, f"{model.__name__} {ident} update")
            await session.refresh(instance)
            return instance

    # ===== USERS =====

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._first(select(User).where(User.username == username))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        # addresses are matched case-insensitively
        return await self._first(select(User).where(func.lower(User.email) == email.lower()))

    async def get_all_users(self) -> List[User]:
        return await self._all(select(User).order_by(User.id))

    async def get_users_by_ids(self, user_ids: Iterable[int]) -> List[User]:
        ids = set(user_ids)
        if not ids:
            return []
        return await self._all(select(User).where(User.id.in_(sorted(ids))).order_by(User.id))

    async def create_user(self, **fields: Any) -> User:
        return await self._insert(User(**fields))

    async def update_user(self, user_id: int, **fields: Any) -> Optional[User]:
        return await self._update(User, user_id, fields)

    # ===== AGENCIES =====

    async def get_agency(self, agency_id: int) -> Optional[Agency]:
        return await self._get(Agency, agency_id)

    async def get_agency_by_user_id(self, user_id: int) -> Optional[Agency]:
        return await self._first(select(Agency).where(Agency.user_id == user_id))

    async def get_all_agencies(self) -> List[Agency]:
        return await self._all(select(Agency).order_by(Agency.id))

    async def create_agency(self, **fields: Any) -> Agency:
        return await self._insert(Agency(**fields))

    async def update_agency(self, agency_id: int, **fields: Any) -> Optional[Agency]:
        return await self._update(Agency, agency_id, fields)

    # ===== DESTINATIONS =====

    async def get_destination(self, destination_id: int) -> Optional[Destination]:
        return await self._get(Destination, destination_id)

    async def get_all_destinations(self) -> List[Destination]:
        return await self._all(select(Destination).order_by(Destination.id))

    async def create_destination(self, **fields: Any) -> Destination:
        return await self._insert(Destination(**fields))

    async def update_destination(self, destination_id: int, **fields: Any) -> Optional[Destination]:
        return await self._update(Destination, destination_id, fields)

    async def seed_destinations(self) -> int:
        """Insert the seed destinations when the table is empty; return rows inserted"""
        async with self.db.get_session() as session:
            existing = await session.scalar(select(func.count(Destination.id)))
            if existing:
                logger.info(f"Destination seed skipped: {existing} rows present")
                return 0

            session.add_all([Destination(**data) for data in SEED_DESTINATIONS])
            await session.commit()

        logger.info(f"Seeded {len(SEED_DESTINATIONS)} destinations")
        return len(SEED_DESTINATIONS)

    # ===== TRAVEL PREFERENCES =====

    async def get_travel_preference(self, preference_id: int) -> Optional[TravelPreference]:
        return await self._get(TravelPreference, preference_id)

    async def get_travel_preferences_by_user_id(self, user_id: int) -> List[TravelPreference]:
        return await self._all(
            select(TravelPreference)
            .where(TravelPreference.user_id == user_id)
            .order_by(TravelPreference.created_at, TravelPreference.id)
        )

    async def get_all_travel_preferences(self) -> List[TravelPreference]:
        return await self._all(
            select(TravelPreference).order_by(TravelPreference.created_at, TravelPreference.id)
        )

    async def create_travel_preference(self, **fields: Any) -> TravelPreference:
        return await self._insert(TravelPreference(**fields))

    async def update_travel_preference(self, preference_id: int, **fields: Any) -> Optional[TravelPreference]:
        return await self._update(TravelPreference, preference_id, fields)

    # ===== TRAVEL PACKAGES =====

    async def get_travel_package(self, package_id: int) -> Optional[TravelPackage]:
        return await self._get(TravelPackage, package_id)

    async def get_travel_packages_by_agency_id(self, agency_id: int) -> List[TravelPackage]:
        return await self._all(
            select(TravelPackage).where(TravelPackage.agency_id == agency_id).order_by(TravelPackage.id)
        )

    async def get_travel_packages_by_preference_id(self, preference_id: int) -> List[TravelPackage]:
        return await self._all(
            select(TravelPackage).where(TravelPackage.preference_id == preference_id).order_by(TravelPackage.id)
        )

    async def create_travel_package(self, **fields: Any) -> TravelPackage:
        return await self._insert(TravelPackage(**fields))

    async def update_travel_package(self, package_id: int, **fields: Any) -> Optional[TravelPackage]:
        return await self._update(TravelPackage, package_id, fields)

    # ===== MESSAGES =====

    async def get_message(self, message_id: int) -> Optional[Message]:
        return await self._get(Message, message_id)

    async def get_messages_between_users(self, user1_id: int, user2_id: int) -> List[Message]:
        return await self._all(
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == user1_id, Message.receiver_id == user2_id),
                    and_(Message.sender_id == user2_id, Message.receiver_id == user1_id),
                )
            )
            .order_by(Message.created_at, Message.id)
        )

    async def get_messages_by_user_id(self, user_id: int) -> List[Message]:
        return await self._all(
            select(Message)
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at, Message.id)
        )

    async def create_message(self, **fields: Any) -> Message:
        return await self._insert(Message(**fields))

    async def mark_message_as_read(self, message_id: int) -> Optional[Message]:
        return await self._update(Message, message_id, {"read": True})
