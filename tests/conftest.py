"""Shared fixtures: an in-memory database and small factories."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from pawfeed.db.repositories.feeding_schedule import FeedingScheduleRepository
from pawfeed.models import FeedingSchedule, Pet
from pawfeed.schemas.feeding_schedule import FeedingScheduleCreate
from pawfeed.services.feeding_schedule_service import FeedingScheduleService

FEEDER_ID = "feeder-001"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_pet(session):
    """Insert a pet with a fixed daily allowance."""

    def _make(allowance: int = 100, name: str = "Miso", feeder_id: str = FEEDER_ID, **fields) -> Pet:
        pet = Pet(feeder_id=feeder_id, name=name, daily_allowance_grams=allowance, **fields)
        session.add(pet)
        session.commit()
        session.refresh(pet)
        return pet

    return _make


@pytest.fixture
def add_schedule(session):
    """Create a schedule through the service, so portions are recalculated."""

    def _add(pet: Pet, days: list[str], time: str = "08:00", name: str = "Meal", **fields):
        data = FeedingScheduleCreate(name=name, time=time, repeat_days=days, **fields)
        return FeedingScheduleService(session).create(pet.feeder_id, pet.id, data)

    return _add


@pytest.fixture
def schedules_of(session):
    """Stored schedules of a pet, freshly read, in creation order."""

    def _read(pet_id: int) -> list[FeedingSchedule]:
        return FeedingScheduleRepository(session).get_all_by_pet(pet_id)

    return _read
