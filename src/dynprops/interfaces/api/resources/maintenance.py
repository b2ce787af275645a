"""JSON cache resync and database optimization resources."""

import falcon

from dynprops.application.services import PropertyService


class SyncResource:
    """POST /v1/entities/{entity_type}/sync - rebuild JSON caches for a type."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_post(self, req: falcon.Request, resp: falcon.Response, entity_type: str) -> None:
        batch_size = req.get_param_as_int("batch_size", min_value=1)
        synced = self._service.sync_all_json_columns(entity_type, batch_size)
        resp.media = {"entity_type": entity_type, "synced": synced}
        resp.status = falcon.HTTP_200


class DatabaseResource:
    """GET /v1/database, POST /v1/database/optimize."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Driver, capability flags and migration hints."""
        resp.media = self._service.get_database_info()
        resp.status = falcon.HTTP_200

    def on_post_optimize(self, req: falcon.Request, resp: falcon.Response) -> None:
        executed = self._service.optimize_database()
        resp.media = {"executed": executed, "features": self._service.get_database_info()["features"]}
        resp.status = falcon.HTTP_200
