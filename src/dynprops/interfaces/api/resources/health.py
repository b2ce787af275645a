"""Health check endpoints."""

import falcon

from dynprops.application.services import PropertyService


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    def on_get_ready(self, req: falcon.Request, resp: falcon.Response) -> None:
        """GET /v1/health/ready - readiness (database reachable)."""
        self._service.list_properties()
        resp.media = {"status": "ready", "driver": self._service.get_database_info()["driver"]}
        resp.status = falcon.HTTP_200
