"""Tests for the Flask routes."""
from unittest.mock import MagicMock

import pytest
import requests

from roombot.server import Services, create_app
from roombot.providers.watson_nlu import NluServiceError

TOKEN = "123:abc"


@pytest.fixture
def services():
    return Services(agent=MagicMock(), telegram=MagicMock(), reminders=MagicMock())


@pytest.fixture
def client(services):
    app = create_app(services, telegram_token=TOKEN)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.mark.integration
class TestMessageRoute:

    def test_returns_conversation_response(self, client, services):
        services.agent.get_response.return_value = {"output": {"text": ["Hi"]}, "context": {"conversation_id": "c1"}}

        r = client.post("/api/message", json={"input": {"text": "hi"}, "context": {"conversation_id": "c0"}})

        assert r.status_code == 200
        assert r.get_json() == {"output": {"text": ["Hi"]}, "context": {"conversation_id": "c1"}}
        services.agent.get_response.assert_called_once_with({"text": "hi"}, {"conversation_id": "c0"})

    def test_empty_body(self, client, services):
        services.agent.get_response.return_value = {"output": {"text": "Welcome"}, "context": {}}

        r = client.post("/api/message")

        assert r.status_code == 200
        services.agent.get_response.assert_called_once_with({}, {})

    def test_service_error_status_is_propagated(self, client, services):
        services.agent.get_response.side_effect = NluServiceError("Not authorized", 401)

        r = client.post("/api/message", json={"input": {"text": "hi"}})

        assert r.status_code == 401
        assert r.get_json() == {"message": "Not authorized", "code": 401}

    def test_other_errors_are_500(self, client, services):
        services.agent.get_response.side_effect = requests.ConnectionError("rbs down")

        r = client.post("/api/message", json={"input": {"text": "hi"}})

        assert r.status_code == 500
        assert r.get_json()["message"] == "rbs down"


@pytest.mark.integration
class TestTelegramWebhook:

    def test_acknowledges_and_hands_off(self, client, services):
        update = {"update_id": 1, "message": {"chat": {"id": 42}, "text": "hi"}}

        r = client.post(f"/bot{TOKEN}", json=update)

        assert r.status_code == 200
        services.telegram.process_update.assert_called_once_with(update)

    def test_wrong_token_is_not_routed(self, client, services):
        r = client.post("/botnope", json={})
        assert r.status_code == 404
        services.telegram.process_update.assert_not_called()

    def test_no_webhook_without_telegram(self):
        app = create_app(Services(agent=MagicMock()), telegram_token=TOKEN)
        assert app.test_client().post(f"/bot{TOKEN}", json={}).status_code == 404


@pytest.mark.integration
class TestSendRemindersCommand:

    def test_runs_job(self, services):
        services.reminders.run.return_value = 2
        app = create_app(services, telegram_token=TOKEN)

        result = app.test_cli_runner().invoke(args=["send-reminders"])

        assert result.exit_code == 0
        assert "2 reminder(s) sent" in result.output

    def test_requires_telegram(self):
        app = create_app(Services(agent=MagicMock()), telegram_token="")

        result = app.test_cli_runner().invoke(args=["send-reminders"])

        assert result.exit_code != 0
