import logging
from typing import Optional

from fastapi import FastAPI

from campus_events.api.routes_events import mount_event_routes
from campus_events.campus_calendar.backends import backend_from_config
from campus_events.campus_calendar.store import EventStore
from campus_events.utils.config import CONFIG
from campus_events.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(store: Optional[EventStore] = None) -> FastAPI:
    """Build the API around *store* (default: the configured backend, loaded)."""
    if store is None:
        setup_logging(CONFIG["log_level"])
        store = EventStore(backend_from_config())
        store.load()

    app = FastAPI(title="Campus Events API")

    @app.get("/health")
    def health():
        return {"status": "ok", "events": len(app.state.store)}

    mount_event_routes(app, store)
    logger.info("API ready with %d event(s)", len(store))
    return app
