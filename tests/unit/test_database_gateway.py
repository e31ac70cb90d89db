import asyncio

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from stairup.enums import RankingMetric, SessionStatus
from stairup.exceptions import AuthError, ConflictError, NotFoundError, StateError
from stairup.gateways.database_gateway import DatabaseGateway, hash_password, verify_password


def run_with_gateway(scenario):
    async def main():
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        gateway = DatabaseGateway(engine=engine)
        await gateway.create_schema()
        try:
            return await scenario(gateway)
        finally:
            await gateway.aclose()
    return asyncio.run(main())


def test_password_hash_roundtrip():
    stored = hash_password("secret")
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("secret", stored)
    assert not verify_password("other", stored)
    assert not verify_password("secret", "garbage")


def test_register_login_and_duplicate_user():
    async def scenario(gateway):
        registered = await gateway.register("alice", "alice@example.com", "secret")
        by_name = await gateway.authenticate("alice", "secret")
        me = await gateway.get_current_user(by_name.token)
        with pytest.raises(ConflictError):
            await gateway.register("alice", "other@example.com", "secret")
        with pytest.raises(AuthError):
            await gateway.authenticate("alice@example.com", "wrong")
        with pytest.raises(AuthError):
            await gateway.get_current_user("bogus")
        return registered, me

    registered, me = run_with_gateway(scenario)

    assert me.id == registered.user.id
    assert me.email == "alice@example.com"


def test_profile_metadata_is_merged():
    async def scenario(gateway):
        auth = await gateway.register("alice", "alice@example.com", "secret")
        await gateway.update_current_user(auth.token, metadata={"nickname": "Al"})
        return await gateway.update_current_user(auth.token, username="alice2", metadata={"phone": "123"})

    user = run_with_gateway(scenario)

    assert user.username == "alice2"
    assert user.metadata == {"nickname": "Al", "phone": "123"}
    assert user.display_name == "Al"


def test_session_lifecycle_and_lap_numbering():
    async def scenario(gateway):
        auth = await gateway.register("alice", "alice@example.com", "secret")
        token = auth.token
        session = await gateway.create_session(token, 2, 10)
        with pytest.raises(ConflictError):
            await gateway.create_session(token, 3, 30)

        first = await gateway.record_lap(token, session.id)
        second = await gateway.record_lap(token, session.id)
        finished = await gateway.finish_session(token, session.id)

        with pytest.raises(StateError):
            await gateway.record_lap(token, session.id)
        with pytest.raises(StateError):
            await gateway.cancel_session(token, session.id)

        laps = await gateway.get_laps(token, session.id)
        active = await gateway.get_active_session(token)
        history = await gateway.list_finished_sessions(token)
        stats = await gateway.get_user_stats(token)
        return session, first, second, finished, laps, active, history, stats

    session, first, second, finished, laps, active, history, stats = run_with_gateway(scenario)

    assert session.status == SessionStatus.ACTIVE
    assert (first.lap_number, second.lap_number) == (1, 2)
    assert [lap.id for lap in laps] == [first.id, second.id]
    assert finished.status == SessionStatus.FINISHED
    assert finished.end_time is not None
    assert active is None
    assert [s.id for s in history] == [session.id]
    assert stats.total_sessions == 1
    assert stats.total_floors == 4
    assert stats.last_session.floors_achieved == 4


def test_sessions_are_private_to_their_owner():
    async def scenario(gateway):
        alice = await gateway.register("alice", "alice@example.com", "secret")
        bob = await gateway.register("bob", "bob@example.com", "secret")
        session = await gateway.create_session(alice.token, 2, 10)
        with pytest.raises(NotFoundError):
            await gateway.get_session(bob.token, session.id)
        with pytest.raises(NotFoundError):
            await gateway.finish_session(bob.token, session.id)
        # Bob can still have his own active session
        return await gateway.create_session(bob.token, 1, 5)

    bob_session = run_with_gateway(scenario)

    assert bob_session.status == SessionStatus.ACTIVE


def test_rankings_order_by_metric():
    async def scenario(gateway):
        alice = await gateway.register("alice", "alice@example.com", "secret")
        bob = await gateway.register("bob", "bob@example.com", "secret")

        s = await gateway.create_session(alice.token, 2, 10)
        await gateway.record_lap(alice.token, s.id)
        await gateway.finish_session(alice.token, s.id)

        for _ in range(2):
            s = await gateway.create_session(bob.token, 1, 10)
            await gateway.record_lap(bob.token, s.id)
            await gateway.finish_session(bob.token, s.id)

        by_floors = await gateway.get_rankings(alice.token, by=RankingMetric.TOTAL_FLOORS)
        by_sessions = await gateway.get_rankings(alice.token, limit=1, by=RankingMetric.TOTAL_SESSIONS)
        return by_floors, by_sessions

    by_floors, by_sessions = run_with_gateway(scenario)

    # Tie on floors is broken by username
    assert [(r.username, r.rank, r.total_floors) for r in by_floors] == [("alice", 1, 2), ("bob", 2, 2)]
    assert [(r.username, r.total_sessions) for r in by_sessions] == [("bob", 2)]


def test_closing_a_closed_session_keeps_its_end_time():
    async def scenario(gateway):
        auth = await gateway.register("alice", "alice@example.com", "secret")
        session = await gateway.create_session(auth.token, 2, 10)
        finished = await gateway.finish_session(auth.token, session.id)
        with pytest.raises(StateError):
            await gateway.finish_session(auth.token, session.id)
        with pytest.raises(StateError):
            await gateway.cancel_session(auth.token, session.id)
        with pytest.raises(NotFoundError):
            await gateway.cancel_session(auth.token, "missing")
        return finished, await gateway.get_session(auth.token, session.id)

    finished, reloaded = run_with_gateway(scenario)

    assert reloaded.status == SessionStatus.FINISHED
    assert reloaded.end_time == finished.end_time
