"""Test data factories using Faker."""

from faker import Faker
from typing import Optional
from datetime import date, datetime, timedelta, timezone

from src.services.todo_mapper import generate_todo_id

fake = Faker()

PRIORITIES = ["Low", "Medium", "High"]


def create_todo_input(with_due: bool = True, with_step: bool = False) -> dict:
    """Create a POST /todos style payload."""
    data = {
        "title": fake.sentence(nb_words=4),
        "priority": fake.random_element(PRIORITIES),
    }
    if with_due:
        data["due"] = (date.today() + timedelta(days=fake.random_int(min=1, max=30))).isoformat()
    if with_step:
        data["step"] = fake.sentence(nb_words=6)
    return data


def create_todo_row(
    has_step: bool = True,
    created_at: Optional[datetime] = None,
    **overrides,
) -> dict:
    """Create a todos table row as Supabase returns it."""
    created_at = created_at or fake.date_time_between(start_date="-30d", tzinfo=timezone.utc)
    row = {
        "id": generate_todo_id(),
        "title": fake.sentence(nb_words=4),
        "completed": fake.boolean(),
        "created_at": created_at.isoformat(),
        "due": None,
        "priority": fake.random_element(PRIORITIES),
    }
    if has_step:
        row["step"] = None
    row.update(overrides)
    return row
