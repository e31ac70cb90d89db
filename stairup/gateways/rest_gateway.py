"""
REST binding of the remote data service.

Talks to the stair-climbing backend over HTTP with a bearer token. Response
bodies are JSON; error bodies carry ``error``, ``message`` or ``detail``.
"""

from typing import Any, Dict, List, Optional, Type

import httpx

from stairup.core.logger import get_logger
from stairup.enums import RankingMetric
from stairup.exceptions import (
    ApplicationException,
    AuthError,
    ConflictError,
    NetworkError,
    NotFoundError,
    StateError,
    ValidationError,
)
from stairup.gateways.base import RemoteDataGateway
from stairup.schemas.session_schemas import TrainingSession, LapEvent
from stairup.schemas.user_schemas import AuthResult, User, UserStats, RankingUser
from stairup.utils.time_utils import parse_instant, utcnow

logger = get_logger("rest_gateway")


class RestGateway(RemoteDataGateway):

    def __init__(
        self,
        base_url: str,
        api_version: str = "/api/v1",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_version = api_version
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"}
        )

    def _build_path(self, endpoint: str) -> str:
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.api_version}{path}"

    @staticmethod
    def _error_message(response: httpx.Response, payload: Any) -> str:
        if isinstance(payload, dict):
            for key in ("error", "message", "detail"):
                if payload.get(key):
                    return str(payload[key])
        return f"HTTP {response.status_code}: {response.reason_phrase}"

    async def _request(
        self,
        method: str,
        endpoint: str,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        conflict_error: Type[ApplicationException] = ConflictError,
        invalid_error: Type[ApplicationException] = ValidationError
    ) -> Any:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        path = self._build_path(endpoint)
        logger.debug(f"API request: {method} {path}")

        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {method} {path}: {e!r}")
            raise NetworkError(f"Network request failed: {e}") from e

        logger.debug(f"API response: {method} {path} -> {response.status_code}")

        payload: Any = None
        if response.content:
            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                payload = response.json()
            else:
                logger.warning(f"Non-JSON response from {path}: {response.text[:200]}")
                payload = {"message": response.text}

        if response.is_success:
            return payload

        message = self._error_message(response, payload)
        status_code = response.status_code
        if status_code == 401:
            raise AuthError(message)
        # 403 means the record exists but belongs to another user
        if status_code in (403, 404):
            raise NotFoundError(message)
        if status_code == 409:
            raise conflict_error(message)
        if status_code in (400, 422):
            raise invalid_error(message)
        raise ApplicationException(message, status_code=status_code)

    # Users
    async def authenticate(self, identifier: str, password: str) -> AuthResult:
        body = {"email": identifier, "password": password}
        if "@" not in identifier:
            body["username"] = identifier
        data = await self._request("POST", "/login", json=body, invalid_error=AuthError)
        return AuthResult(**data)

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        data = await self._request(
            "POST",
            "/register",
            json={"username": username, "email": email, "password": password}
        )
        return AuthResult(**data)

    async def get_current_user(self, token: str) -> User:
        data = await self._request("GET", "/me", token=token)
        return User(**data)

    async def update_current_user(
        self,
        token: str,
        username: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> User:
        body: Dict[str, Any] = {}
        if username is not None:
            body["username"] = username
        if metadata is not None:
            body["metadata"] = metadata
        data = await self._request("PUT", "/me", token=token, json=body)
        return User(**data)

    async def get_user_stats(self, token: str) -> UserStats:
        data = await self._request("GET", "/me/stats", token=token) or {}
        total_time = int(data.get("total_time") or 0)
        data.setdefault("total_minutes", total_time // 60)
        data.setdefault("this_week_sessions", data.get("weekly_sessions") or 0)
        data.setdefault("this_week_minutes", data.get("weekly_minutes") or 0)
        return UserStats(**data)

    async def get_rankings(
        self,
        token: str,
        limit: int = 10,
        by: RankingMetric = RankingMetric.TOTAL_FLOORS
    ) -> List[RankingUser]:
        data = await self._request(
            "GET",
            "/rankings",
            token=token,
            params={"limit": limit, "by": RankingMetric(by).value}
        )
        return [RankingUser(**row) for row in data or []]

    # Sessions
    async def get_active_session(self, token: str) -> Optional[TrainingSession]:
        try:
            data = await self._request("GET", "/sessions/active", token=token)
        except NotFoundError:
            return None
        if not data or not data.get("id"):
            return None
        return TrainingSession(**data)

    async def create_session(self, token: str, floors_per_lap: int, target_floors: int) -> TrainingSession:
        data = await self._request(
            "POST",
            "/sessions/",
            token=token,
            json={"floors_per_lap": floors_per_lap, "target_floors": target_floors}
        )
        return TrainingSession(**data)

    async def _transition(self, endpoint: str, token: str, session_id: str) -> TrainingSession:
        data = await self._request(
            "POST",
            endpoint,
            token=token,
            json={"session_id": session_id},
            conflict_error=StateError,
            invalid_error=StateError
        )
        return TrainingSession(**data)

    async def finish_session(self, token: str, session_id: str) -> TrainingSession:
        return await self._transition("/sessions/finish", token, session_id)

    async def cancel_session(self, token: str, session_id: str) -> TrainingSession:
        return await self._transition("/sessions/cancel", token, session_id)

    async def list_finished_sessions(self, token: str) -> List[TrainingSession]:
        data = await self._request("GET", "/sessions/finished", token=token)
        return [TrainingSession(**row) for row in data or []]

    async def get_session(self, token: str, session_id: str) -> TrainingSession:
        data = await self._request("GET", f"/sessions/{session_id}", token=token)
        if not data:
            raise NotFoundError(f"Session {session_id} not found")
        return TrainingSession(**data)

    # Laps
    async def record_lap(self, token: str, session_id: str) -> LapEvent:
        data = await self._request(
            "POST",
            "/sessions/record",
            token=token,
            json={"session_id": session_id},
            conflict_error=StateError,
            invalid_error=StateError
        ) or {}

        if data.get("lap_number") is not None:
            return self._lap_event(data, session_id)

        # The record endpoint does not number laps; read the numbered ledger back
        try:
            laps = await self.get_laps(token, session_id)
        except ApplicationException as e:
            logger.warning(f"Lap read-back for session {session_id} failed: {e.message}")
            laps = []

        for lap in reversed(laps):
            if data.get("id") is not None and lap.id == str(data["id"]):
                return lap
        if laps and data.get("id") is None:
            return laps[-1]

        # The lap is stored; report it unnumbered rather than as a failure
        finish = data.get("lap_finish_time") or data.get("lap_time") or data.get("created_at")
        return LapEvent(
            id=data.get("lap_id") or data.get("id"),
            session_id=session_id,
            lap_number=0,
            lap_finish_time=parse_instant(finish) or utcnow()
        )

    async def get_laps(self, token: str, session_id: str) -> List[LapEvent]:
        data = await self._request("GET", f"/lap/stats/{session_id}", token=token)
        events = [self._lap_event(row, session_id) for row in data or []]
        return sorted(events, key=lambda e: e.lap_number)

    @staticmethod
    def _lap_event(row: Dict[str, Any], session_id: str) -> LapEvent:
        # Rows come from the lap statistics view; older backends name the
        # completion instant lap_time or created_at
        finish = row.get("lap_finish_time") or row.get("lap_time") or row.get("created_at")
        return LapEvent(
            id=row.get("lap_id") or row.get("id"),
            session_id=row.get("session_id") or session_id,
            lap_number=row["lap_number"],
            lap_finish_time=parse_instant(finish)
        )

    async def aclose(self) -> None:
        await self._client.aclose()
