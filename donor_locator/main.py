import asyncio
import logging
import sys

from donor_locator.config import Settings, settings
from donor_locator.db import Database
from donor_locator.webapp import start_server


def configure_logging(app_settings: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if app_settings.LOG_DIR is not None:
        app_settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(app_settings.LOG_DIR / "server.log", encoding="utf-8"))

    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    # SQL statements are only interesting when DB_ECHO is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if app_settings.DB_ECHO else logging.WARNING
    )


async def main(app_settings: Settings = settings) -> None:
    configure_logging(app_settings)
    logging.info("Donor locator starting…")

    database = Database(app_settings.database_url, echo=app_settings.DB_ECHO)
    try:
        await database.init(migrate=app_settings.AUTO_MIGRATE)
        await start_server(database, app_settings)
    finally:
        await database.close()
        logging.info("Donor locator stopped")


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    run()
