import os
from datetime import timedelta, timezone

from dotenv import load_dotenv

load_dotenv()

# NLU (Watson Assistant v1 message API)
WORKSPACE_ID = os.getenv("WORKSPACE_ID", "")
CONVERSATION_URL = os.getenv("CONVERSATION_URL", "https://gateway.watsonplatform.net/conversation/api")
CONVERSATION_VERSION = os.getenv("CONVERSATION_VERSION", "2017-05-26")
CONVERSATION_APIKEY = os.getenv("CONVERSATION_APIKEY", "")
CONVERSATION_USERNAME = os.getenv("CONVERSATION_USERNAME", "")
CONVERSATION_PASSWORD = os.getenv("CONVERSATION_PASSWORD", "")

# Room booking service
RBS_URL = os.getenv("RBS_URL", "http://localhost:8080")

# Telegram
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "")
PUBLIC_URL = os.getenv("PUBLIC_URL", "")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///roombot.db")
REMINDER_SCHEDULE_ENABLED = os.getenv("REMINDER_SCHEDULE_ENABLED", "true").lower() in {"1", "true", "yes"}
HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "15"))

# Booking defaults; the bot only books a single room on a single site.
ROOM_ID = "room1/camomile"
SITE_ID = "camomile"
PURPOSE = "quick review"
ATTENDEES = 5

# All dates/times exchanged with users are interpreted in UTC+9.
KST = timezone(timedelta(hours=9))
CONTEXT_TIMEZONE = "Asia/Seoul"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"

CHANNEL_TYPE = "telegram"
