"""
Main entry point for the CareBook scheduling backend.
Wires storage and scheduling services and starts the HTTP API server.
"""

import logging
import os
from typing import Optional

from aiohttp import web
from dotenv import load_dotenv

from config.settings import Settings, get_settings
from carebook.api.auth import TokenVerifier
from carebook.api.routes import create_app
from carebook.models import DoctorCatalog
from carebook.services import (
    AppointmentStore,
    AvailabilityChecker,
    BookingService,
    InMemoryAppointmentStore,
    LifecycleService,
    MeetLinkIssuer,
    SlotGenerator,
    SupabaseService,
)
from carebook.tools.appointment_tools import AppointmentTools
from carebook.utils import clinic_today

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables (override=True ensures .env values take precedence)
load_dotenv(override=True)


def create_store(settings: Settings) -> AppointmentStore:
    """Build the configured appointment store."""
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory appointment store; data is lost on restart")
        return InMemoryAppointmentStore()

    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase storage backend"
        )
    return SupabaseService(
        url=settings.supabase_url,
        key=settings.supabase_service_role_key,
    )


def build_tools(
    settings: Settings,
    store: AppointmentStore,
    catalog: Optional[DoctorCatalog] = None,
) -> AppointmentTools:
    """Assemble the scheduling services around a store."""
    if catalog is None:
        catalog = DoctorCatalog()
    slot_generator = SlotGenerator(settings.time_slots)
    availability = AvailabilityChecker(store, slot_generator, catalog)
    today = clinic_today(settings.clinic_timezone)

    return AppointmentTools(
        store=store,
        slot_generator=slot_generator,
        availability=availability,
        booking=BookingService(store, availability),
        lifecycle=LifecycleService(store, availability, today),
        meet_links=MeetLinkIssuer(store, base_url=settings.meet_link_base_url),
        catalog=catalog,
    )


def build_app(settings: Settings) -> web.Application:
    """Create the fully wired aiohttp application."""
    tools = build_tools(settings, create_store(settings))
    app = create_app(
        appointment_tools=tools,
        token_verifier=TokenVerifier(settings.jwt_secret, settings.jwt_algorithm),
        cors_origins=settings.cors_origins,
    )
    logger.info(f"Application initialized ({settings.environment}, {settings.storage_backend} storage)")
    return app


def main():
    """Main entry point."""
    settings = get_settings()
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    app = build_app(settings)

    port = int(os.environ.get("PORT", 5000))
    host = os.environ.get("HOST", "0.0.0.0")
    logger.info("Starting API server")
    web.run_app(app, host=host, port=port)


if __name__ == "__main__":
    main()
