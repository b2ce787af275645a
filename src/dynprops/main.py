"""Application entry point and composition root."""

import argparse
import logging

import falcon

from dynprops import __version__
from dynprops.application.services import PropertyService
from dynprops.config import Settings, get_settings
from dynprops.infrastructure.persistence.sql import (
    DatabaseCompatibility,
    EntityTableRegistry,
    create_db_engine,
    create_uow_factory,
)
from dynprops.interfaces.api.app import create_app
from dynprops.interfaces.api.middleware.cors import CORSMiddleware
from dynprops.interfaces.api.resources.entity_properties import (
    EntityPropertiesResource,
    EntityPropertyResource,
)
from dynprops.interfaces.api.resources.health import HealthResource
from dynprops.interfaces.api.resources.maintenance import DatabaseResource, SyncResource
from dynprops.interfaces.api.resources.properties import (
    PropertyDefinitionResource,
    PropertyDefinitionsResource,
)
from dynprops.interfaces.api.resources.search import SearchResource
from dynprops.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_property_service(settings: Settings | None = None) -> PropertyService:
    """Build the property service from settings (engine, capabilities, unit of work)."""
    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url, echo=settings.debug)
    compatibility = DatabaseCompatibility(engine)
    property_settings = settings.property_settings()
    entity_tables = EntityTableRegistry.from_mapping(
        settings.entity_table_map(), property_settings.json_cache_column
    )
    uow_factory = create_uow_factory(engine, compatibility, entity_tables)
    logger.info(
        "Property service ready (driver=%s, features=%s)",
        compatibility.driver,
        compatibility.features,
    )
    return PropertyService(uow_factory, compatibility, property_settings)


def create_dynprops_app(
    settings: Settings | None = None,
    property_service: PropertyService | None = None,
) -> falcon.App:
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    service = property_service or create_property_service(settings)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return create_app(
        health_resource=HealthResource(service),
        definitions_resource=PropertyDefinitionsResource(service),
        definition_resource=PropertyDefinitionResource(service),
        entity_properties_resource=EntityPropertiesResource(service),
        entity_property_resource=EntityPropertyResource(service),
        search_resource=SearchResource(service),
        sync_resource=SyncResource(service),
        database_resource=DatabaseResource(service),
        middleware=[CORSMiddleware(cors_origins)],
    )


def main() -> None:
    """CLI entry point - serve the HTTP API."""
    parser = argparse.ArgumentParser(prog="dynprops", description=f"dynprops v{__version__}")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level)

    import uvicorn

    app = create_dynprops_app(settings)
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        interface="wsgi",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
