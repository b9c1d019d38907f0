"""Shared fixtures: a fresh SQLite database per test, seeded users and a logged-in client."""

import pytest

from app import create_app
from database import add_user

PASSWORD = "correct-horse-battery"

ACCOUNTS = {
    "admin": ("Admin User", "admin@eau-vigilance.com", "admin", []),
    "agent": ("Site Agent", "agent@eau-vigilance.com", "site_agent", ["site-1"]),
    "external": ("External Supervisor", "external@eau-vigilance.com", "external_supervisor", ["site-1", "site-2"]),
    "director": ("Director DREEC", "director@eau-vigilance.com", "director", []),
    "professor": ("Professor DGAE", "professor@eau-vigilance.com", "professor", ["site-1", "site-2"]),
}


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "eau_vigilance_test.db"),
        "SECRET_KEY": "test-secret",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """Creates one account per role and returns {account key: user id}."""
    return {
        key: add_user(name, email, PASSWORD, role, site_ids=sites)
        for key, (name, email, role, sites) in ACCOUNTS.items()
    }


@pytest.fixture
def login(client, users):
    """Logs the test client in as one of the ACCOUNTS and returns the user payload."""

    def _login(account):
        response = client.post(
            "/api/auth/login",
            json={"email": ACCOUNTS[account][1], "password": PASSWORD},
        )
        assert response.status_code == 200, response.get_json()
        return response.get_json()

    return _login


@pytest.fixture
def submit(client):
    """Posts a reading for the logged-in user. Site defaults to site-1."""

    def _submit(site_id="site-1", **fields):
        payload = {"site_id": site_id, "latitude": 12.55, "longitude": -12.17}
        payload.update(fields)
        return client.post("/api/data", json=payload)

    return _submit
