"""
History Controller
"""
from typing import Dict

from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.services.statistics_service import SessionStatisticsAggregator
from stairup.utils.time_utils import format_duration, elapsed_seconds


class HistoryController:
    """Controller for past training sessions."""

    @staticmethod
    async def list_sessions(lifecycle_manager: SessionLifecycleManager) -> Dict:
        sessions = await lifecycle_manager.get_finished_sessions()
        items = []
        for session in sessions:
            duration = elapsed_seconds(session.start_time, session.end_time) if session.end_time else 0
            items.append({
                "session": session,
                "duration_seconds": duration,
                "duration_display": format_duration(duration),
            })
        return {"sessions": items, "count": len(items)}

    @staticmethod
    async def get_session_detail(ledger: LapLedger, session_id: str) -> Dict:
        session, laps = await ledger.load(session_id)
        statistics = SessionStatisticsAggregator.compute(session, laps)

        lap_rows = [
            {
                **lap.dict(),
                "formatted_lap_time": format_duration(lap.lap_time_seconds),
            }
            for lap in laps
        ]

        formatted = None
        if statistics.total_laps:
            formatted = {
                "total_time": format_duration(statistics.total_time_seconds),
                "average_time_per_lap": format_duration(statistics.average_time_per_lap),
                "fastest_lap_time": format_duration(statistics.fastest_lap_time),
                "slowest_lap_time": format_duration(statistics.slowest_lap_time),
            }

        return {
            "session": session,
            "laps": lap_rows,
            "statistics": statistics,
            "formatted_statistics": formatted,
        }
