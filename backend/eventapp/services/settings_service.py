"""Read access to the externally administered settings record."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from eventapp.errors import ConfigurationError
from eventapp.models.system_settings import SystemSettings

logger = logging.getLogger(__name__)


class EventSettingsReader:
    """Looks up ``eventSettings`` on every call; nothing is cached between requests."""

    def read(self, db: Session) -> Optional[dict[str, Any]]:
        row = db.query(SystemSettings).order_by(SystemSettings.settings_id).first()
        if row is None:
            return None
        return row.event_settings

    def max_attendees_per_event(self, db: Session) -> int:
        event_settings = self.read(db)
        if not event_settings or event_settings.get("maxAttendeesPerEvent") is None:
            logger.error("Settings record or eventSettings.maxAttendeesPerEvent is missing")
            raise ConfigurationError()
        try:
            return int(event_settings["maxAttendeesPerEvent"])
        except (TypeError, ValueError):
            raise ConfigurationError("Event settings contain an invalid maxAttendeesPerEvent")


def get_settings_reader() -> EventSettingsReader:
    return EventSettingsReader()
