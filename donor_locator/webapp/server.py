"""HTTP front for the donor registry.

Routes:

* ``POST /api/donors`` registers a donor.
* ``GET /api/donors/search?latitude=..&longitude=..&bloodGroup=..`` lists
  donors of that blood group within the configured radius, nearest first.
"""

from __future__ import annotations

import asyncio
import json
import logging

import aiohttp_cors
from aiohttp import web
from pydantic import ValidationError as PydanticValidationError

from donor_locator.config import Settings, settings as default_settings
from donor_locator.db import Database
from donor_locator.errors import ValidationError
from donor_locator.models import SearchQuery
from donor_locator.services.donors import register_donor, search_donors
from donor_locator.webapp.middleware import DATABASE_KEY, db_session_middleware, error_middleware

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", Settings)

_ABO_LETTERS = {"A", "B", "AB", "O"}

routes = web.RouteTableDef()


@routes.post("/api/donors")
async def create_donor(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON.") from None

    donor_id = await register_donor(request["session"], payload)
    return web.json_response(
        {"message": "Donor registered successfully!", "donorId": donor_id},
        status=201,
    )


@routes.get("/api/donors/search")
async def search(request: web.Request) -> web.Response:
    params = dict(request.query)
    blood_group = params.get("bloodGroup")
    if blood_group and blood_group.endswith(" ") and blood_group.rstrip().upper() in _ABO_LETTERS:
        # An unencoded "+" in the query string arrives as a space
        params["bloodGroup"] = blood_group.rstrip() + "+"

    try:
        query = SearchQuery.model_validate(params)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(
            exc, "Latitude, longitude, and blood group are required."
        ) from exc

    radius_km = request.app[SETTINGS_KEY].SEARCH_RADIUS_KM
    matches = await search_donors(
        request["session"], (query.latitude, query.longitude), query.blood_group, radius_km
    )
    return web.json_response([m.model_dump(by_alias=True) for m in matches])


def setup_cors(app: web.Application, origins: list[str]) -> None:
    """Allow browser clients served from *origins* to call every route."""
    options = aiohttp_cors.ResourceOptions(
        allow_credentials=False,
        expose_headers="*",
        allow_headers="*",
        allow_methods="*",
    )
    cors = aiohttp_cors.setup(app, defaults={origin: options for origin in origins})
    for route in list(app.router.routes()):
        cors.add(route)


def create_app(database: Database, app_settings: Settings | None = None) -> web.Application:
    """Build the aiohttp application around an already opened *database*."""
    app = web.Application(middlewares=[error_middleware, db_session_middleware])
    app[DATABASE_KEY] = database
    app[SETTINGS_KEY] = app_settings or default_settings
    app.add_routes(routes)
    setup_cors(app, app[SETTINGS_KEY].CORS_ORIGINS)
    return app


async def start_server(database: Database, app_settings: Settings | None = None) -> None:
    """Serve the API until cancelled.

    This coroutine **never returns** on its own; cancel it (or stop the event
    loop) to shut the server down.
    """
    _settings = app_settings or default_settings
    app = create_app(database, _settings)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=_settings.HOST, port=_settings.PORT)
    await site.start()

    logger.info("Donor API listening on http://%s:%d/", _settings.HOST, _settings.PORT)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
