import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from stairup.enums import RankingMetric, SessionStatus
from stairup.exceptions import AuthError, ConflictError, NotFoundError, StateError
from stairup.gateways.base import RemoteDataGateway
from stairup.schemas.session_schemas import TrainingSession, LapEvent
from stairup.schemas.user_schemas import AuthResult, User, UserStats, RankingUser
from stairup.services.token_store import InMemoryTokenStore

START = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)
TOKEN = "token-alice"


class FakeGateway(RemoteDataGateway):
    """In-memory remote data service with a hand-driven clock."""

    def __init__(self):
        self.now = START
        self.users: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, str] = {}
        self.sessions: Dict[str, TrainingSession] = {}
        self.laps: Dict[str, List[LapEvent]] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(1)

        self.add_user("u1", "alice", "alice@example.com", "secret", TOKEN)

    # Test helpers
    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now

    def add_user(self, user_id, username, email, password, token=None):
        self.users[user_id] = {
            "id": user_id, "username": username, "email": email,
            "password": password, "metadata": {},
        }
        if token:
            self.tokens[token] = user_id

    def revoke(self, token: str) -> None:
        self.tokens.pop(token, None)

    def _user_id(self, token: str) -> str:
        if token not in self.tokens:
            raise AuthError("Invalid authentication token")
        return self.tokens[token]

    def _user(self, user_id: str) -> User:
        data = self.users[user_id]
        return User(id=data["id"], username=data["username"], email=data["email"], metadata=data["metadata"])

    def _owned(self, token: str, session_id: str) -> TrainingSession:
        user_id = self._user_id(token)
        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    # Users
    async def authenticate(self, identifier, password):
        self.calls.append("authenticate")
        for user_id, data in self.users.items():
            if identifier in (data["email"], data["username"]) and data["password"] == password:
                token = f"token-{next(self._ids)}"
                self.tokens[token] = user_id
                return AuthResult(token=token, user=self._user(user_id))
        raise AuthError("Invalid username or password")

    async def register(self, username, email, password):
        self.calls.append("register")
        if any(d["username"] == username or d["email"] == email for d in self.users.values()):
            raise ConflictError("Username or email already registered")
        user_id = f"u{next(self._ids)}"
        token = f"token-{user_id}"
        self.add_user(user_id, username, email, password, token)
        return AuthResult(token=token, user=self._user(user_id))

    async def get_current_user(self, token):
        self.calls.append("get_current_user")
        return self._user(self._user_id(token))

    async def update_current_user(self, token, username=None, metadata=None):
        self.calls.append("update_current_user")
        data = self.users[self._user_id(token)]
        if username is not None:
            data["username"] = username
        if metadata is not None:
            data["metadata"] = {**data["metadata"], **metadata}
        return self._user(data["id"])

    async def get_user_stats(self, token):
        self.calls.append("get_user_stats")
        user_id = self._user_id(token)
        finished = [
            s for s in self.sessions.values()
            if s.user_id == user_id and s.status == SessionStatus.FINISHED
        ]
        total_time = sum(int((s.end_time - s.start_time).total_seconds()) for s in finished)
        total_floors = sum(len(self.laps.get(s.id, [])) * s.floors_per_lap for s in finished)
        return UserStats(
            total_sessions=len(finished),
            total_time=total_time,
            total_minutes=total_time // 60,
            total_floors=total_floors,
        )

    async def get_rankings(self, token, limit=10, by=RankingMetric.TOTAL_FLOORS):
        self.calls.append("get_rankings")
        self._user_id(token)
        return [
            RankingUser(user_id=user_id, username=data["username"], rank=position)
            for position, (user_id, data) in enumerate(list(self.users.items())[:limit], start=1)
        ]

    # Sessions
    async def get_active_session(self, token):
        self.calls.append("get_active_session")
        user_id = self._user_id(token)
        for session in self.sessions.values():
            if session.user_id == user_id and session.status == SessionStatus.ACTIVE:
                return session
        return None

    async def create_session(self, token, floors_per_lap, target_floors):
        self.calls.append("create_session")
        user_id = self._user_id(token)
        if any(s.user_id == user_id and s.is_active for s in self.sessions.values()):
            raise ConflictError("An active training session already exists")
        session = TrainingSession(
            id=f"s{next(self._ids)}",
            user_id=user_id,
            start_time=self.now,
            floors_per_lap=floors_per_lap,
            target_floors=target_floors,
            status=SessionStatus.ACTIVE,
            created_at=self.now,
        )
        self.sessions[session.id] = session
        self.laps[session.id] = []
        return session

    async def _close(self, token, session_id, status):
        session = self._owned(token, session_id)
        if not session.is_active:
            raise StateError(f"Session {session_id} is already {session.status.value}")
        closed = session.copy(update={"status": status, "end_time": self.now})
        self.sessions[session_id] = closed
        return closed

    async def finish_session(self, token, session_id):
        self.calls.append("finish_session")
        return await self._close(token, session_id, SessionStatus.FINISHED)

    async def cancel_session(self, token, session_id):
        self.calls.append("cancel_session")
        return await self._close(token, session_id, SessionStatus.ABANDONED)

    async def list_finished_sessions(self, token):
        self.calls.append("list_finished_sessions")
        user_id = self._user_id(token)
        return [
            s for s in self.sessions.values()
            if s.user_id == user_id and s.status == SessionStatus.FINISHED
        ]

    async def get_session(self, token, session_id):
        self.calls.append("get_session")
        return self._owned(token, session_id)

    # Laps
    async def record_lap(self, token, session_id):
        self.calls.append("record_lap")
        session = self._owned(token, session_id)
        if not session.is_active:
            raise StateError(f"Cannot record a lap on a {session.status.value} session")
        laps = self.laps[session_id]
        event = LapEvent(
            id=f"l{next(self._ids)}",
            session_id=session_id,
            lap_number=len(laps) + 1,
            lap_finish_time=self.now,
        )
        laps.append(event)
        return event

    async def get_laps(self, token, session_id):
        self.calls.append("get_laps")
        self._owned(token, session_id)
        return list(self.laps[session_id])


def make_session(
    start: datetime = START,
    end: Optional[datetime] = None,
    status: SessionStatus = SessionStatus.ACTIVE,
    floors_per_lap: int = 2,
    target_floors: int = 20,
    session_id: str = "s1",
) -> TrainingSession:
    return TrainingSession(
        id=session_id,
        user_id="u1",
        start_time=start,
        end_time=end,
        floors_per_lap=floors_per_lap,
        target_floors=target_floors,
        status=status,
        created_at=start,
    )


def make_lap(number: int, offset_seconds: float, session_id: str = "s1", start: datetime = START) -> LapEvent:
    return LapEvent(
        id=f"l{number}",
        session_id=session_id,
        lap_number=number,
        lap_finish_time=start + timedelta(seconds=offset_seconds),
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def token_store():
    return InMemoryTokenStore(TOKEN)
