"""Falcon WSGI application."""

import falcon

from dynprops.domain.exceptions import DynPropsError
from dynprops.interfaces.api.errors import handle_dynprops_error, handle_unexpected_error
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


def create_app(
    health_resource: HealthResource,
    definitions_resource: PropertyDefinitionsResource,
    definition_resource: PropertyDefinitionResource,
    entity_properties_resource: EntityPropertiesResource,
    entity_property_resource: EntityPropertyResource,
    search_resource: SearchResource,
    sync_resource: SyncResource,
    database_resource: DatabaseResource,
    middleware: list | None = None,
) -> falcon.App:
    """Create Falcon WSGI app with routes and error handlers."""
    app = falcon.App(middleware=middleware or [])
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(DynPropsError, handle_dynprops_error)

    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/properties", definitions_resource)
    app.add_route("/v1/properties/{name}", definition_resource)
    app.add_route(
        "/v1/entities/{entity_type}/{entity_id}/properties", entity_properties_resource
    )
    app.add_route(
        "/v1/entities/{entity_type}/{entity_id}/properties/{name}", entity_property_resource
    )
    app.add_route("/v1/entities/{entity_type}/search", search_resource)
    app.add_route("/v1/entities/{entity_type}/sync", sync_resource)
    app.add_route("/v1/database", database_resource)
    app.add_route("/v1/database/optimize", database_resource, suffix="optimize")
    return app
