from __future__ import annotations

import logging

from dotenv import load_dotenv

from storefront.application import Repositories, create_app
from storefront.core.config import AppConfig
from storefront.core.database import apply_mongo_migrations, create_mongo_client, ping
from storefront.core.logging import setup_logging
from storefront.mail.sender import ResendMailer
from storefront.media.uploader import CloudinaryUploader

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)

MONGO_CLIENT = create_mongo_client(APP_CONFIG.mongo)
DATABASE = MONGO_CLIENT[APP_CONFIG.mongo.database]
if ping(MONGO_CLIENT):
    apply_mongo_migrations(DATABASE)
else:
    LOGGER.warning("MongoDB is unreachable; migrations were not applied")

app = create_app(
    APP_CONFIG,
    repositories=Repositories.from_database(DATABASE),
    media=CloudinaryUploader(APP_CONFIG.media),
    mailer=ResendMailer(APP_CONFIG.mail),
)


@app.on_event("shutdown")
def _close_mongo_client() -> None:
    MONGO_CLIENT.close()
