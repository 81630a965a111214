import logging

from aiohttp import web

from donor_locator.db import Database
from donor_locator.errors import DuplicateDonorError, StorageError, ValidationError

logger = logging.getLogger(__name__)

DATABASE_KEY = web.AppKey("database", Database)


def error_body(message: str, errors: list[dict[str, str]] | None = None) -> dict:
    return {"message": message, "errors": errors or []}


@web.middleware
async def db_session_middleware(request: web.Request, handler):
    """Open one session per request and close it once the handler is done."""
    database = request.app[DATABASE_KEY]
    async with database.session() as session:
        request["session"] = session
        return await handler(request)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map the donor_locator error kinds to JSON responses."""
    try:
        return await handler(request)
    except ValidationError as exc:
        logger.warning("Client error on %s %s: %s", request.method, request.path, exc.message)
        return web.json_response(error_body(exc.message, exc.errors), status=400)
    except DuplicateDonorError as exc:
        logger.warning("Duplicate donor phone %s", exc.phone)
        return web.json_response(
            error_body("A donor with this phone number is already registered."),
            status=409,
        )
    except StorageError:
        logger.exception("Storage failure on %s %s", request.method, request.path)
        return web.json_response(error_body("Internal server error."), status=500)
