"""Shared test fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.routes import router
from src.calculators.schedule_loader import load_registered_schedules


@pytest.fixture
def app() -> FastAPI:
    """A test app with the router and schedule registry but no lifespan."""
    test_app = FastAPI()
    test_app.include_router(router)
    test_app.state.schedules = load_registered_schedules()
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
