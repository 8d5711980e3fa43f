from datetime import datetime
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from volunteer_scheduler.database import Base, build_engine, build_session_factory
from volunteer_scheduler.main import create_app
from volunteer_scheduler.models import (
    Event,
    Notification,
    Role,
    Schedule,
    SwapRequest,
    Team,
    User,
    Volunteer,
)

# Each helper opens and closes its own session: SQLite transactions start
# with BEGIN IMMEDIATE, so a session left open would block the app's writers.


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'scheduler.db'}")
    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seed(session_factory):
    """
    Two teams (the second without a leader), four volunteers and four events:
    two on 2025-06-01, one on 2025-06-08 and one on 2025-06-15.
    """
    with session_factory() as db:
        admin = User(username="admin", name="Admin", email="admin@example.org", role="admin")
        leader = User(username="lena", name="Lena Leader", email="lena@example.org", role="leader")
        alice = User(username="alice", name="Alice", email="alice@example.org")
        bob = User(username="bob", name="Bob", email="bob@example.org")
        carol = User(username="carol", name="Carol", email="carol@example.org")
        dave = User(username="dave", name="Dave", email="dave@example.org")
        db.add_all([admin, leader, alice, bob, carol, dave])
        db.flush()

        worship = Team(name="Worship", leader_id=leader.id)
        hospitality = Team(name="Hospitality", leader_id=None)
        db.add_all([worship, hospitality])
        db.flush()

        singer = Role(name="Singer", team_id=worship.id)
        greeter = Role(name="Greeter", team_id=hospitality.id)
        db.add_all([singer, greeter])
        db.flush()

        x = Volunteer(user_id=alice.id, team_id=worship.id, role_id=singer.id)
        y = Volunteer(user_id=bob.id, team_id=worship.id, role_id=singer.id)
        z = Volunteer(user_id=carol.id, team_id=worship.id, role_id=singer.id, is_trainee=True)
        w = Volunteer(user_id=dave.id, team_id=hospitality.id, role_id=greeter.id)
        db.add_all([x, y, z, w])
        db.flush()

        morning = Event(
            title="Sunday Service",
            location="Main Hall",
            event_date=datetime(2025, 6, 1, 9, 0),
            event_type="service",
        )
        evening = Event(
            title="Evening Worship",
            location="Chapel",
            event_date=datetime(2025, 6, 1, 18, 0),
            event_type="service",
        )
        next_week = Event(
            title="Next Sunday",
            location="Main Hall",
            event_date=datetime(2025, 6, 8, 9, 0),
            event_type="service",
        )
        later = Event(
            title="Summer Picnic",
            location="Park",
            event_date=datetime(2025, 6, 15, 12, 0),
            event_type="special",
        )
        db.add_all([morning, evening, next_week, later])
        db.commit()

        return SimpleNamespace(
            admin_user=admin.id,
            leader_user=leader.id,
            alice_user=alice.id,
            bob_user=bob.id,
            carol_user=carol.id,
            dave_user=dave.id,
            worship_team=worship.id,
            hospitality_team=hospitality.id,
            x=x.id,
            y=y.id,
            z=z.id,
            w=w.id,
            morning=morning.id,
            evening=evening.id,
            next_week=next_week.id,
            later=later.id,
        )


@pytest.fixture
def add_schedule(session_factory, seed):
    """Insert a schedule straight through the ORM, skipping the conflict check"""

    def _add(event_id, volunteer_id, status="confirmed"):
        with session_factory() as db:
            schedule = Schedule(
                event_id=event_id,
                volunteer_id=volunteer_id,
                status=status,
                created_by_id=seed.admin_user,
            )
            db.add(schedule)
            db.commit()
            return schedule.id

    return _add


@pytest.fixture
def add_swap_request(session_factory):
    def _add(requestor_schedule_id, target_schedule_id=None, target_volunteer_id=None):
        with session_factory() as db:
            swap_request = SwapRequest(
                requestor_schedule_id=requestor_schedule_id,
                target_schedule_id=target_schedule_id,
                target_volunteer_id=target_volunteer_id,
                reason="",
                status="pending",
            )
            db.add(swap_request)
            db.commit()
            return swap_request.id

    return _add


class StoreReader:
    """Read-only snapshots of what the database holds right now"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def schedule(self, schedule_id):
        with self.session_factory() as db:
            s = db.get(Schedule, schedule_id)
            return SimpleNamespace(
                id=s.id, event_id=s.event_id, volunteer_id=s.volunteer_id, status=s.status
            )

    def swap_status(self, swap_request_id):
        with self.session_factory() as db:
            return db.get(SwapRequest, swap_request_id).status

    def swap_request_count(self):
        with self.session_factory() as db:
            return db.query(SwapRequest).count()

    def notifications(self, user_id=None):
        with self.session_factory() as db:
            query = db.query(Notification)
            if user_id is not None:
                query = query.filter(Notification.user_id == user_id)
            return [
                SimpleNamespace(user_id=n.user_id, title=n.title, message=n.message, type=n.type)
                for n in query.order_by(Notification.id).all()
            ]


@pytest.fixture
def store(session_factory):
    return StoreReader(session_factory)


@pytest_asyncio.fixture
async def client(session_factory):
    app = create_app(session_factory=session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client
