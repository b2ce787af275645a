"""Entity property API resources."""

import falcon

from dynprops.application.services import PropertyService
from dynprops.domain.entities import EntityRef
from dynprops.interfaces.api.serializers import value_to_json, values_to_json


class EntityPropertiesResource:
    """GET/PUT/DELETE /v1/entities/{entity_type}/{entity_id}/properties."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(
        self, req: falcon.Request, resp: falcon.Response, entity_type: str, entity_id: str
    ) -> None:
        entity = EntityRef(entity_type, entity_id)
        resp.media = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "properties": values_to_json(self._service.get_properties(entity)),
        }
        resp.status = falcon.HTTP_200

    def on_put(
        self, req: falcon.Request, resp: falcon.Response, entity_type: str, entity_id: str
    ) -> None:
        """Set several properties atomically. Body: {"properties": {name: value}}."""
        body = req.get_media()
        values = body.get("properties") if isinstance(body, dict) else None
        if not isinstance(values, dict):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Body must contain a 'properties' object"}
            return
        entity = EntityRef(entity_type, entity_id)
        self._service.set_properties(entity, values)
        resp.media = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "properties": values_to_json(self._service.get_properties(entity)),
        }
        resp.status = falcon.HTTP_200

    def on_delete(
        self, req: falcon.Request, resp: falcon.Response, entity_type: str, entity_id: str
    ) -> None:
        removed = self._service.remove_all_properties(EntityRef(entity_type, entity_id))
        resp.media = {"removed": removed}
        resp.status = falcon.HTTP_200


class EntityPropertyResource:
    """GET/PUT/DELETE /v1/entities/{entity_type}/{entity_id}/properties/{name}."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        entity_type: str,
        entity_id: str,
        name: str,
    ) -> None:
        value = self._service.get_property(EntityRef(entity_type, entity_id), name)
        resp.media = {"name": name, "value": value_to_json(value)}
        resp.status = falcon.HTTP_200

    def on_put(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        entity_type: str,
        entity_id: str,
        name: str,
    ) -> None:
        """Set one property. Body: {"value": ...}."""
        body = req.get_media()
        if not isinstance(body, dict) or "value" not in body:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Body must contain 'value'"}
            return
        entity = EntityRef(entity_type, entity_id)
        self._service.set_property(entity, name, body["value"])
        resp.media = {"name": name, "value": value_to_json(self._service.get_property(entity, name))}
        resp.status = falcon.HTTP_200

    def on_delete(
        self,
        req: falcon.Request,
        resp: falcon.Response,
        entity_type: str,
        entity_id: str,
        name: str,
    ) -> None:
        removed = self._service.remove_property(EntityRef(entity_type, entity_id), name)
        resp.media = {"name": name, "removed": removed}
        resp.status = falcon.HTTP_200
