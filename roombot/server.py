import logging
from dataclasses import dataclass
from typing import Optional

import click
from flask import Flask, request, jsonify

from roombot.agents.conversation import ConversationAgent
from roombot.agents.reminders import ReminderJob, ReminderScheduler
from roombot.channels.telegram import TelegramAdapter
from roombot.config import PUBLIC_URL, REMINDER_SCHEDULE_ENABLED, TELEGRAM_TOKEN
from roombot.graph.graph import ActionDispatcher
from roombot.providers.rbs_booking import RbsBookingProvider
from roombot.providers.telegram import TelegramProvider
from roombot.providers.watson_nlu import WatsonConversationProvider
from roombot.store import ConversationStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    agent: ConversationAgent
    telegram: Optional[TelegramAdapter] = None
    reminders: Optional[ReminderJob] = None


def build_services(telegram_token: str = TELEGRAM_TOKEN) -> Services:
    """Construct every client once; the app and the scheduler share them."""
    from roombot.db import SessionLocal

    booking = RbsBookingProvider()
    agent = ConversationAgent(WatsonConversationProvider(), ActionDispatcher(booking))
    if not telegram_token:
        logger.warning("TELEGRAM_TOKEN not set, Telegram channel disabled")
        return Services(agent=agent)

    store = ConversationStore(SessionLocal)
    chat = TelegramProvider(telegram_token)
    return Services(
        agent=agent,
        telegram=TelegramAdapter(agent, store, chat),
        reminders=ReminderJob(booking, store, chat),
    )


def create_app(services: Optional[Services] = None, telegram_token: str = TELEGRAM_TOKEN) -> Flask:
    app = Flask(__name__)
    services = services or build_services(telegram_token)
    app.extensions["roombot"] = services

    @app.post("/api/message")
    def message():
        body = request.get_json(silent=True) or {}
        user_input = body.get("input") or {}
        context = body.get("context") or {}

        try:
            data = services.agent.get_response(user_input, context)
        except Exception as e:
            logger.exception("Conversation request failed")
            code = getattr(e, "code", None) or getattr(e, "status_code", None) or 500
            return jsonify({"message": str(e), "code": code}), code

        return jsonify(data)

    if services.telegram and telegram_token:
        @app.post(f"/bot{telegram_token}")
        def telegram_webhook():
            services.telegram.process_update(request.get_json(silent=True) or {})
            return "OK", 200

    @app.cli.command("send-reminders")
    def send_reminders():
        """Send meeting alerts for bookings starting within the hour."""
        if not services.reminders:
            raise click.ClickException("TELEGRAM_TOKEN is not set")
        sent = services.reminders.run()
        click.echo(f"{sent} reminder(s) sent")

    return app


if __name__ == "__main__":
    from roombot.db import init_db

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    # Create tables (simple dev mode)
    init_db()
    app = create_app()
    services = app.extensions["roombot"]

    if services.telegram and PUBLIC_URL:
        services.telegram.register_webhook(PUBLIC_URL, TELEGRAM_TOKEN)

    if services.reminders and REMINDER_SCHEDULE_ENABLED:
        ReminderScheduler(services.reminders).start()

    app.run(host="0.0.0.0", port=5000)
