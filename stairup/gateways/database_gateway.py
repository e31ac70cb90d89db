"""
Hosted backend binding of the remote data service.

Reads and writes the backend's tables directly, the way a hosted
backend-as-a-service client does, instead of going through the REST API.
Ownership is enforced on every query by filtering on the token's user.
"""

import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func, or_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from stairup.core.logger import get_logger
from stairup.database.base import Base
from stairup.database.connection import create_engine_for, build_sessionmaker, session_scope
from stairup.enums import RankingMetric, SessionStatus
from stairup.exceptions import AuthError, ConflictError, NotFoundError, StateError
from stairup.gateways.base import RemoteDataGateway
from stairup.models.auth_token import AuthToken as AuthTokenModel
from stairup.models.lap_record import LapRecord as LapRecordModel
from stairup.models.training_session import TrainingSession as TrainingSessionModel
from stairup.models.user import User as UserModel
from stairup.schemas.session_schemas import TrainingSession, LapEvent
from stairup.schemas.user_schemas import AuthResult, User, UserStats, RankingUser, LastSessionSummary
from stairup.utils.time_utils import utcnow, ensure_utc, elapsed_seconds

logger = get_logger("database_gateway")

PBKDF2_ITERATIONS = 200_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, expected = stored.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


class DatabaseGateway(RemoteDataGateway):

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[AsyncEngine] = None,
        token_ttl_hours: int = 168
    ):
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            engine = create_engine_for(database_url)
        self.engine = engine
        self._sessionmaker = build_sessionmaker(engine)
        self.token_ttl = timedelta(hours=token_ttl_hours)

    async def create_schema(self) -> None:
        """Create missing tables (development and tests; production uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Training database tables ensured.")

    # Conversions
    @staticmethod
    def _to_user(row: UserModel) -> User:
        return User(
            id=row.id,
            username=row.username,
            email=row.email,
            created_at=row.created_at,
            metadata=dict(row.profile_metadata or {})
        )

    @staticmethod
    def _to_session(row: TrainingSessionModel) -> TrainingSession:
        return TrainingSession(
            id=row.id,
            user_id=row.user_id,
            start_time=row.start_time,
            end_time=row.end_time,
            floors_per_lap=row.floors_per_lap,
            target_floors=row.target_floors,
            status=row.status,
            created_at=row.created_at
        )

    # Auth helpers
    async def _issue_token(self, db: AsyncSession, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        now = utcnow()
        db.add(AuthTokenModel(token=token, user_id=user_id, created_at=now, expires_at=now + self.token_ttl))
        return token

    async def _resolve_user(self, db: AsyncSession, token: str) -> UserModel:
        if not token:
            raise AuthError("Missing authentication token")
        result = await db.execute(
            select(AuthTokenModel, UserModel)
            .join(UserModel, UserModel.id == AuthTokenModel.user_id)
            .where(AuthTokenModel.token == token)
        )
        row = result.first()
        if row is None:
            raise AuthError("Invalid authentication token")
        auth_token, user = row
        if ensure_utc(auth_token.expires_at) <= utcnow():
            raise AuthError("Authentication token expired")
        return user

    async def _owned_session(self, db: AsyncSession, user_id: str, session_id: str) -> TrainingSessionModel:
        result = await db.execute(
            select(TrainingSessionModel)
            .where(TrainingSessionModel.id == session_id)
            .where(TrainingSessionModel.user_id == user_id)
        )
        session = result.scalar_one_or_none()
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    # Users
    async def authenticate(self, identifier: str, password: str) -> AuthResult:
        async with session_scope(self._sessionmaker) as db:
            result = await db.execute(
                select(UserModel).where(
                    or_(UserModel.email == identifier, UserModel.username == identifier)
                )
            )
            user = result.scalars().first()
            if user is None or not verify_password(password, user.password_hash):
                raise AuthError("Invalid username or password")

            token = await self._issue_token(db, user.id)
            await db.commit()
            logger.info(f"User {user.username} logged in")
            return AuthResult(token=token, user=self._to_user(user))

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        async with session_scope(self._sessionmaker) as db:
            existing = await db.execute(
                select(UserModel.id).where(
                    or_(UserModel.email == email, UserModel.username == username)
                )
            )
            if existing.first() is not None:
                raise ConflictError("Username or email already registered")

            user = UserModel(
                username=username,
                email=email,
                password_hash=hash_password(password),
                profile_metadata={},
                created_at=utcnow()
            )
            db.add(user)
            await db.flush()
            token = await self._issue_token(db, user.id)
            await db.commit()
            logger.info(f"Registered user {username}")
            return AuthResult(token=token, user=self._to_user(user))

    async def get_current_user(self, token: str) -> User:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            return self._to_user(user)

    async def update_current_user(
        self,
        token: str,
        username: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> User:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)

            if username is not None and username != user.username:
                taken = await db.execute(
                    select(UserModel.id).where(UserModel.username == username)
                )
                if taken.first() is not None:
                    raise ConflictError(f"Username {username} is already taken")
                user.username = username

            if metadata is not None:
                merged = dict(user.profile_metadata or {})
                merged.update(metadata)
                user.profile_metadata = merged

            await db.commit()
            await db.refresh(user)
            return self._to_user(user)

    async def _lap_counts(self, db: AsyncSession, session_ids: List[str]) -> Dict[str, int]:
        if not session_ids:
            return {}
        result = await db.execute(
            select(LapRecordModel.session_id, func.count(LapRecordModel.id))
            .where(LapRecordModel.session_id.in_(session_ids))
            .group_by(LapRecordModel.session_id)
        )
        return {session_id: count for session_id, count in result.all()}

    async def get_user_stats(self, token: str) -> UserStats:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            result = await db.execute(
                select(TrainingSessionModel)
                .where(TrainingSessionModel.user_id == user.id)
                .where(TrainingSessionModel.status == SessionStatus.FINISHED.value)
                .order_by(desc(TrainingSessionModel.created_at))
            )
            sessions = result.scalars().all()
            lap_counts = await self._lap_counts(db, [s.id for s in sessions])

        now = utcnow()
        week_start = (now - timedelta(days=now.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)

        total_time = 0
        total_floors = 0
        week_sessions = 0
        week_time = 0
        for s in sessions:
            duration = elapsed_seconds(s.start_time, s.end_time)
            total_time += duration
            total_floors += lap_counts.get(s.id, 0) * s.floors_per_lap
            if ensure_utc(s.start_time) >= week_start:
                week_sessions += 1
                week_time += duration

        last_session = None
        if sessions:
            last = sessions[0]
            last_session = LastSessionSummary(
                id=last.id,
                start_time=ensure_utc(last.start_time),
                end_time=ensure_utc(last.end_time),
                floors_achieved=lap_counts.get(last.id, 0) * last.floors_per_lap
            )

        return UserStats(
            total_sessions=len(sessions),
            total_time=total_time,
            total_minutes=total_time // 60,
            total_floors=total_floors,
            this_week_sessions=week_sessions,
            this_week_minutes=week_time // 60,
            last_session=last_session
        )

    async def get_rankings(
        self,
        token: str,
        limit: int = 10,
        by: RankingMetric = RankingMetric.TOTAL_FLOORS
    ) -> List[RankingUser]:
        by = RankingMetric(by)
        async with session_scope(self._sessionmaker) as db:
            await self._resolve_user(db, token)
            result = await db.execute(
                select(TrainingSessionModel, UserModel.username)
                .join(UserModel, UserModel.id == TrainingSessionModel.user_id)
                .where(TrainingSessionModel.status == SessionStatus.FINISHED.value)
            )
            rows = result.all()
            lap_counts = await self._lap_counts(db, [s.id for s, _ in rows])

        totals: Dict[str, Dict[str, Any]] = {}
        for s, username in rows:
            entry = totals.setdefault(s.user_id, {
                "user_id": s.user_id,
                "username": username,
                "total_sessions": 0,
                "total_floors": 0,
                "total_time": 0,
            })
            entry["total_sessions"] += 1
            entry["total_floors"] += lap_counts.get(s.id, 0) * s.floors_per_lap
            entry["total_time"] += elapsed_seconds(s.start_time, s.end_time)

        ordered = sorted(totals.values(), key=lambda e: (-e[by.value], e["username"]))
        return [
            RankingUser(rank=position, **entry)
            for position, entry in enumerate(ordered[:limit], start=1)
        ]

    # Sessions
    async def get_active_session(self, token: str) -> Optional[TrainingSession]:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            result = await db.execute(
                select(TrainingSessionModel)
                .where(TrainingSessionModel.user_id == user.id)
                .where(TrainingSessionModel.status == SessionStatus.ACTIVE.value)
            )
            session = result.scalars().first()
            return self._to_session(session) if session else None

    async def create_session(self, token: str, floors_per_lap: int, target_floors: int) -> TrainingSession:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            user_id = user.id

            existing = await db.execute(
                select(TrainingSessionModel.id)
                .where(TrainingSessionModel.user_id == user_id)
                .where(TrainingSessionModel.status == SessionStatus.ACTIVE.value)
            )
            if existing.first() is not None:
                raise ConflictError("An active training session already exists")

            now = utcnow()
            session = TrainingSessionModel(
                user_id=user_id,
                start_time=now,
                end_time=None,
                floors_per_lap=floors_per_lap,
                target_floors=target_floors,
                status=SessionStatus.ACTIVE.value,
                created_at=now
            )
            db.add(session)
            try:
                await db.commit()
            except IntegrityError as e:
                # Lost a race against another insert for the same user
                await db.rollback()
                raise ConflictError("An active training session already exists") from e

            logger.info(f"Created training session {session.id} for user {user_id}")
            return self._to_session(session)

    async def _close_session(self, token: str, session_id: str, status: SessionStatus) -> TrainingSession:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            # Rollback expires loaded rows
            user_id = user.id
            result = await db.execute(
                update(TrainingSessionModel)
                .where(TrainingSessionModel.id == session_id)
                .where(TrainingSessionModel.user_id == user_id)
                .where(TrainingSessionModel.status == SessionStatus.ACTIVE.value)
                .values(status=status.value, end_time=utcnow())
            )
            if result.rowcount == 0:
                await db.rollback()
                session = await self._owned_session(db, user_id, session_id)
                raise StateError(f"Session {session_id} is already {session.status}")

            await db.commit()
            session = await self._owned_session(db, user_id, session_id)
            return self._to_session(session)

    async def finish_session(self, token: str, session_id: str) -> TrainingSession:
        return await self._close_session(token, session_id, SessionStatus.FINISHED)

    async def cancel_session(self, token: str, session_id: str) -> TrainingSession:
        return await self._close_session(token, session_id, SessionStatus.ABANDONED)

    async def list_finished_sessions(self, token: str) -> List[TrainingSession]:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            result = await db.execute(
                select(TrainingSessionModel)
                .where(TrainingSessionModel.user_id == user.id)
                .where(TrainingSessionModel.status == SessionStatus.FINISHED.value)
                .order_by(desc(TrainingSessionModel.created_at))
            )
            return [self._to_session(s) for s in result.scalars().all()]

    async def get_session(self, token: str, session_id: str) -> TrainingSession:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            session = await self._owned_session(db, user.id, session_id)
            return self._to_session(session)

    # Laps
    @staticmethod
    async def _load_laps(db: AsyncSession, session_id: str) -> List[LapEvent]:
        result = await db.execute(
            select(LapRecordModel)
            .where(LapRecordModel.session_id == session_id)
            .order_by(LapRecordModel.created_at, LapRecordModel.id)
        )
        return [
            LapEvent(
                id=lap.id,
                session_id=lap.session_id,
                lap_number=position,
                lap_finish_time=lap.created_at
            )
            for position, lap in enumerate(result.scalars().all(), start=1)
        ]

    async def record_lap(self, token: str, session_id: str) -> LapEvent:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            session = await self._owned_session(db, user.id, session_id)
            if session.status != SessionStatus.ACTIVE.value:
                raise StateError(f"Cannot record a lap on a {session.status} session")

            lap = LapRecordModel(session_id=session_id, created_at=utcnow())
            db.add(lap)
            await db.commit()

            laps = await self._load_laps(db, session_id)
            return next(event for event in laps if event.id == lap.id)

    async def get_laps(self, token: str, session_id: str) -> List[LapEvent]:
        async with session_scope(self._sessionmaker) as db:
            user = await self._resolve_user(db, token)
            await self._owned_session(db, user.id, session_id)
            return await self._load_laps(db, session_id)

    async def aclose(self) -> None:
        await self.engine.dispose()
