import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import bootstrap, cleanup_dependencies, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import rates
from application.services.currency_service import adopt_environment_locale
from config.log_config import configure_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
	configure_logging(level=settings.LOG_LEVEL, log_directory=settings.LOG_DIRECTORY)
	adopt_environment_locale()
	logger.info(f'Starting {settings.APP_NAME}...')

	init_dependencies(settings)
	await bootstrap()

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.include_router(rates.router)
register_exception_handlers(app)
