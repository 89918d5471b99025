"""
Tests for the onboarding status HTTP client
"""
import pytest
import requests
from unittest.mock import MagicMock
from api.services.onboarding_client import OnboardingClient, OnboardingStatusError


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = "error body"
    response.json.return_value = payload
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


def test_fetch_status_success(session):
    payload = {"trialStatus": {"active": True, "daysRemaining": 4}, "plan": "Pro", "subscriptionStatus": "trial"}
    session.get.return_value = make_response(200, payload)

    client = OnboardingClient("http://localhost:8000/", access_token="tok", session=session)

    assert client.fetch_status() == payload
    session.get.assert_called_once_with(
        "http://localhost:8000/api/user/onboarding/status", timeout=5
    )
    assert session.headers["Authorization"] == "Bearer tok"


@pytest.mark.parametrize("status_code", [401, 404, 500])
def test_non_2xx_is_raised(session, status_code):
    session.get.return_value = make_response(status_code)
    client = OnboardingClient("http://localhost:8000", session=session)

    with pytest.raises(OnboardingStatusError) as exc_info:
        client.fetch_status()
    assert exc_info.value.status_code == status_code


def test_network_error_is_raised(session):
    session.get.side_effect = requests.ConnectionError("refused")
    client = OnboardingClient("http://localhost:8000", session=session)

    with pytest.raises(OnboardingStatusError) as exc_info:
        client.fetch_status()
    assert "refused" in str(exc_info.value)


def test_invalid_json_is_raised(session):
    response = make_response(200)
    response.json.side_effect = ValueError("no json")
    session.get.return_value = response
    client = OnboardingClient("http://localhost:8000", session=session)

    with pytest.raises(OnboardingStatusError):
        client.fetch_status()
