import logging

from notification_feed.config import get_settings
from notification_feed.interfaces.push import create_push_app

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())

app = create_push_app(settings)
