"""Property definition API resources."""

import falcon

from dynprops.application.services import PropertyService
from dynprops.interfaces.api.serializers import definition_to_dict


class PropertyDefinitionsResource:
    """GET/POST /v1/properties - list and create property definitions."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(self, req: falcon.Request, resp: falcon.Response) -> None:
        """List definitions, optionally filtered by type."""
        prop_type = req.get_param("type")
        definitions = self._service.list_properties()
        if prop_type:
            definitions = [d for d in definitions if d.type.value == prop_type]
        resp.media = {"items": [definition_to_dict(d) for d in definitions]}
        resp.status = falcon.HTTP_200

    def on_post(self, req: falcon.Request, resp: falcon.Response) -> None:
        """Create a property definition."""
        body = req.get_media()
        if not isinstance(body, dict):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Request body must be a JSON object"}
            return
        definition = self._service.create_property(body)
        resp.media = definition_to_dict(definition)
        resp.status = falcon.HTTP_201


class PropertyDefinitionResource:
    """GET/DELETE /v1/properties/{name}."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_get(self, req: falcon.Request, resp: falcon.Response, name: str) -> None:
        resp.media = definition_to_dict(self._service.get_property_definition(name))
        resp.status = falcon.HTTP_200

    def on_delete(self, req: falcon.Request, resp: falcon.Response, name: str) -> None:
        """Delete definition and all of its values."""
        affected = self._service.delete_property(name)
        resp.media = {"deleted": name, "entities_affected": affected}
        resp.status = falcon.HTTP_200
