"""Search API resource."""

import falcon

from dynprops.application.services import PropertyService


class SearchResource:
    """POST /v1/entities/{entity_type}/search - filter entities by property values."""

    def __init__(self, property_service: PropertyService) -> None:
        self._service = property_service

    def on_post(self, req: falcon.Request, resp: falcon.Response, entity_type: str) -> None:
        """Body: {"filters": {...}, "logic": "AND" | "OR"}."""
        body = req.get_media()
        filters = body.get("filters") if isinstance(body, dict) else None
        if not isinstance(filters, dict):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Body must contain a 'filters' object"}
            return

        entity_ids = self._service.advanced_search(
            entity_type, filters, body.get("logic") or "AND"
        )
        resp.media = {
            "entity_type": entity_type,
            "entity_ids": sorted(entity_ids),
            "count": len(entity_ids),
        }
        resp.status = falcon.HTTP_200
