"""
Statistics Aggregator

Pure derivations from a session and its lap ledger. Nothing computed here is
persisted; callers recompute on every read.
"""

import math
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from stairup.schemas.session_schemas import (
    TrainingSession, LapRecord, SessionStatistics, SessionParameterSuggestions
)
from stairup.utils.time_utils import elapsed_seconds, utcnow


class SessionStatisticsAggregator:

    @staticmethod
    def completion_rate(total_floors_climbed: int, target_floors: int) -> int:
        """Rounded percentage of the target reached. Not capped at 100."""
        if target_floors <= 0:
            return 0
        # Halves round up
        return max(0, math.floor(100 * total_floors_climbed / target_floors + 0.5))

    @staticmethod
    def compute(session: TrainingSession, laps: Sequence[LapRecord]) -> SessionStatistics:
        total_laps = len(laps)
        total_floors_climbed = total_laps * session.floors_per_lap

        if total_laps == 0:
            return SessionStatistics(
                session_id=session.id,
                total_laps=0,
                total_floors_climbed=0,
                target_floors=session.target_floors,
                completion_rate=0,
                total_time_seconds=0,
            )

        lap_times = [lap.lap_time_seconds for lap in laps]

        # A closed session includes idle time after the last lap
        if session.status.is_terminal and session.end_time is not None:
            total_time_seconds = elapsed_seconds(session.start_time, session.end_time)
        else:
            total_time_seconds = sum(lap_times)

        return SessionStatistics(
            session_id=session.id,
            total_laps=total_laps,
            total_floors_climbed=total_floors_climbed,
            target_floors=session.target_floors,
            completion_rate=SessionStatisticsAggregator.completion_rate(
                total_floors_climbed, session.target_floors
            ),
            total_time_seconds=total_time_seconds,
            average_time_per_lap=total_time_seconds / total_laps,
            fastest_lap_time=min(lap_times),
            slowest_lap_time=max(lap_times),
        )

    @staticmethod
    def live_elapsed_seconds(session: TrainingSession, now: Optional[datetime] = None) -> int:
        """
        Running timer shown while training. Reads the wall clock for an active
        session only; a closed session reports its stored duration.
        """
        if session.end_time is not None:
            return elapsed_seconds(session.start_time, session.end_time)
        return elapsed_seconds(session.start_time, now or utcnow())

    @staticmethod
    def suggest_session_parameters(
        sessions: Iterable[TrainingSession],
        limit: int = 5
    ) -> SessionParameterSuggestions:
        """Distinct positive floors-per-lap and target values from past sessions, smallest first."""
        sessions = list(sessions)

        def distinct(values: Iterable[int]) -> List[int]:
            return sorted({v for v in values if v and v > 0})[:limit]

        return SessionParameterSuggestions(
            floors_per_lap=distinct(s.floors_per_lap for s in sessions),
            target_floors=distinct(s.target_floors for s in sessions),
        )
