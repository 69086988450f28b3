import logging
from dataclasses import dataclass, field
from typing import Dict

import requests

from rental_availability.models import Coordinates
from rental_availability.store import BookingStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-scoped state: the HTTP session, the store client and the geocode cache.

    Built once at start-up and passed to whatever needs it. Tests build a
    fresh one so no cached state leaks between them.
    """

    session: requests.Session
    store: BookingStore
    geocode_cache: Dict[str, Coordinates] = field(default_factory=dict)

    @classmethod
    def create(cls) -> "AppContext":
        session = requests.Session()
        logger.debug("Created application context")
        return cls(session=session, store=BookingStore(session=session))

    def close(self):
        self.geocode_cache.clear()
        self.session.close()
        logger.debug("Closed application context")

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc_info):
        self.close()
