"""
Lap Ledger

Append-only record of lap completions per session. Lap durations are derived
on every read from the finish timestamps, never stored.
"""

from typing import List, Sequence, Tuple

from stairup.core.logger import get_logger
from stairup.exceptions import StateError
from stairup.schemas.session_schemas import TrainingSession, LapEvent, LapRecord
from stairup.services.base_service import AuthenticatedService
from stairup.utils.time_utils import elapsed_seconds

logger = get_logger("lap_ledger_service")


def build_lap_records(session: TrainingSession, events: Sequence[LapEvent]) -> List[LapRecord]:
    """
    Order lap events and attach each lap's duration: the gap since the previous
    lap's finish, or since the session start for the first lap.
    """
    ordered = sorted(events, key=lambda e: (e.lap_number, e.lap_finish_time))

    records = []
    previous_finish = session.start_time
    for position, event in enumerate(ordered, start=1):
        if event.lap_number != position:
            logger.warning(
                f"Session {session.id}: lap numbered {event.lap_number} at position {position}, renumbering"
            )
        records.append(LapRecord(
            id=event.id,
            session_id=event.session_id,
            lap_number=position,
            lap_finish_time=event.lap_finish_time,
            lap_time_seconds=elapsed_seconds(previous_finish, event.lap_finish_time)
        ))
        previous_finish = event.lap_finish_time

    return records


class LapLedger(AuthenticatedService):

    async def load(self, session_id: str) -> Tuple[TrainingSession, List[LapRecord]]:
        """Session and its laps in lap order; NotFoundError if it is not the user's."""
        session = await self._call(self.gateway.get_session, session_id)
        events = await self._call(self.gateway.get_laps, session_id)
        return session, build_lap_records(session, events)

    async def get_laps_for_session(self, session_id: str) -> List[LapRecord]:
        _, laps = await self.load(session_id)
        return laps

    async def record_lap(self, session_id: str) -> LapRecord:
        """
        Append one lap to an active session.

        The previous laps are read before the write; once the gateway has
        stored the lap nothing else is read, so a stored lap is never
        reported as a failure.
        """
        session, previous = await self.load(session_id)
        if not session.is_active:
            raise StateError(f"Cannot record a lap on a {session.status.value} session")

        event = await self._call(self.gateway.record_lap, session_id)

        previous_finish = previous[-1].lap_finish_time if previous else session.start_time
        record = LapRecord(
            id=event.id,
            session_id=session_id,
            lap_number=len(previous) + 1,
            lap_finish_time=event.lap_finish_time,
            lap_time_seconds=elapsed_seconds(previous_finish, event.lap_finish_time)
        )
        if event.lap_number != record.lap_number:
            logger.warning(
                f"Session {session_id}: gateway numbered lap {event.lap_number}, expected {record.lap_number}"
            )
        logger.info(f"Session {session_id}: recorded lap {record.lap_number}")
        return record
