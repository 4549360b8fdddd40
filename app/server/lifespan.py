from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import (
    get_settings,
    get_sync_orchestrator,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from modules.auth_sync.orchestrator import SyncOrchestrator


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(settings=settings)


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    # Only top-level scalar values are logged; nested settings report their keys
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _log_sync_setup(orchestrator: "SyncOrchestrator", logger: BoundLogger) -> None:
    if orchestrator.client is None:
        logger.warning(
            "auth_sync_remote_not_configured",
            message="Set AUTH_SYNC_REMOTE_URL to enable credential sync",
        )
    logger.info(
        "auth_sync_ready",
        providers=[definition.name for definition in orchestrator.definitions],
        skip_oauth_configured=orchestrator.skip_oauth_configured,
        global_timeout_seconds=orchestrator.global_timeout_seconds,
    )


async def _shutdown_sync(orchestrator: "SyncOrchestrator", logger: BoundLogger) -> None:
    if orchestrator.cancel():
        logger.info("auth_sync_cancelled_on_shutdown")
    if orchestrator.client is not None:
        await orchestrator.client.aclose()
        logger.info("auth_sync_client_closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    orchestrator = get_sync_orchestrator()
    app.state.orchestrator = orchestrator
    _log_sync_setup(orchestrator, logger)

    yield

    logger.info("application_shutdown")
    await _shutdown_sync(app.state.orchestrator, logger)
