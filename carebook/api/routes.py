"""
API routes for the scheduling backend.
Provides endpoints for:
- Health checks
- Doctor catalog
- Availability, booking, cancel, reschedule
- Meeting links
"""

import json
import logging
from typing import List, Optional

from aiohttp import web

from ..utils import utc_now
from .auth import USER_ID_KEY, TokenVerifier, auth_middleware

logger = logging.getLogger(__name__)


def create_app(
    appointment_tools,
    token_verifier: TokenVerifier,
    cors_origins: Optional[List[str]] = None,
) -> web.Application:
    """
    Create the aiohttp application with routes.

    Args:
        appointment_tools: AppointmentTools instance
        token_verifier: Verifies bearer tokens and resolves user ids
        cors_origins: Allowed origins; empty reflects the request origin

    Returns:
        Configured aiohttp Application
    """
    app = web.Application(middlewares=[cors_middleware, auth_middleware])

    # Store services in app
    app["tools"] = appointment_tools
    app["token_verifier"] = token_verifier
    app["cors_origins"] = list(cors_origins or [])

    # Add routes
    app.router.add_get("/health", health_check)
    app.router.add_get("/api/doctors", list_doctors)
    app.router.add_post("/api/appointments/check-availability", check_availability)
    app.router.add_post("/api/appointments/book", book_appointment)
    app.router.add_get("/api/appointments/my-appointments", my_appointments)
    app.router.add_put("/api/appointments/cancel/{id}", cancel_appointment)
    app.router.add_put("/api/appointments/reschedule/{id}", reschedule_appointment)
    app.router.add_post("/api/appointments/create-meet", create_meet)

    return app


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Handle CORS for frontend requests."""
    # Handle preflight
    if request.method == "OPTIONS":
        response = web.Response()
    else:
        try:
            response = await handler(request)
        except web.HTTPException as e:
            _add_cors_headers(request, e)
            raise

    _add_cors_headers(request, response)
    return response


def _add_cors_headers(request: web.Request, response) -> None:
    origin = request.headers.get("Origin")
    allowed = request.app["cors_origins"]
    if origin and (not allowed or origin in allowed):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"


def _respond(result) -> web.Response:
    return web.json_response(result.to_response(), status=result.status)


async def _read_json(request: web.Request) -> dict:
    """Request body as a dict; raises 400 on malformed JSON."""
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(f"Malformed JSON body on {request.path}")
        raise web.HTTPBadRequest(
            text=json.dumps({"success": False, "message": "Invalid JSON body"}),
            content_type="application/json",
        )
    if not isinstance(data, dict):
        raise web.HTTPBadRequest(
            text=json.dumps({"success": False, "message": "Request body must be an object"}),
            content_type="application/json",
        )
    return data


async def health_check(request: web.Request) -> web.Response:
    """Health check endpoint."""
    return web.json_response({
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": "carebook",
    })


async def list_doctors(request: web.Request) -> web.Response:
    """
    Doctor catalog and slot table.

    Query params:
    - specialization: optional filter
    """
    tools = request.app["tools"]
    return _respond(await tools.list_doctors(request.query.get("specialization")))


async def check_availability(request: web.Request) -> web.Response:
    """
    Check a doctor's slots on a day.

    Request body:
    {
        "doctorName": "Dr. Harsha",
        "date": "2025-03-10",
        "timeSlot": "10:00 AM"
    }
    """
    data = await _read_json(request)
    tools = request.app["tools"]
    return _respond(await tools.check_availability(data))


async def book_appointment(request: web.Request) -> web.Response:
    """
    Book an appointment for the authenticated user.

    Request body:
    {
        "doctorName": "Dr. Harsha",
        "specialization": "Neurology",
        "date": "2025-03-10",
        "timeSlot": "10:00 AM",
        "patientName": "Alice",
        "patientPhone": "+15550100",
        "reason": "optional"
    }
    """
    data = await _read_json(request)
    tools = request.app["tools"]
    return _respond(await tools.book_appointment(request[USER_ID_KEY], data))


async def my_appointments(request: web.Request) -> web.Response:
    """List the authenticated user's appointments."""
    tools = request.app["tools"]
    return _respond(await tools.retrieve_appointments(request[USER_ID_KEY]))


async def cancel_appointment(request: web.Request) -> web.Response:
    """Cancel an appointment by id."""
    tools = request.app["tools"]
    appointment_id = request.match_info["id"]
    return _respond(await tools.cancel_appointment(request[USER_ID_KEY], appointment_id))


async def reschedule_appointment(request: web.Request) -> web.Response:
    """
    Move an appointment to a new date and slot.

    Request body:
    {
        "date": "2025-03-11",
        "timeSlot": "02:00 PM"
    }
    """
    data = await _read_json(request)
    tools = request.app["tools"]
    appointment_id = request.match_info["id"]
    return _respond(await tools.modify_appointment(request[USER_ID_KEY], appointment_id, data))


async def create_meet(request: web.Request) -> web.Response:
    """
    Create or fetch the meeting link of an appointment.

    Request body:
    {
        "appointmentId": "..."
    }
    """
    data = await _read_json(request)
    tools = request.app["tools"]
    appointment_id = data.get("appointmentId")
    if appointment_id is not None:
        appointment_id = str(appointment_id)
    return _respond(await tools.create_meet_link(request[USER_ID_KEY], appointment_id))
