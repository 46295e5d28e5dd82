"""Fixtures for API integration tests: a live app on a temporary database."""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from coursereg.api.app import create_app
from coursereg.api.dependencies import get_calendar, get_entity_store
from coursereg.config import Settings
from coursereg.entity_store import EntityStore
from coursereg.entity_store.models import User


@dataclass
class Api:
    """A running app, its store, and the seeded catalog."""

    client: TestClient
    store: EntityStore
    clock: Mock
    catalog: object

    def as_user(self, user: User) -> dict[str, str]:
        return {"X-User-Id": user.id}


@pytest.fixture
def api(tmp_path: Path, clock: Mock, seed) -> Iterator[Api]:
    """Start the app against a file database and seed the standard catalog."""
    settings = Settings(db_path=str(tmp_path / "api.db"), log_dir=str(tmp_path / "logs"))
    app = create_app(settings, clock=clock)
    with TestClient(app) as client:
        store = next(get_entity_store())
        catalog = seed(store, next(get_calendar()))
        yield Api(client=client, store=store, clock=clock, catalog=catalog)
