"""Error handlers mapping domain exceptions to HTTP responses."""

import logging

import falcon

from dynprops.domain.exceptions import DynPropsError

logger = logging.getLogger(__name__)


def handle_dynprops_error(
    req: falcon.Request, resp: falcon.Response, ex: DynPropsError, params: dict
) -> None:
    resp.status = falcon.code_to_http_status(ex.status_code)
    resp.media = ex.to_dict()


def handle_unexpected_error(
    req: falcon.Request, resp: falcon.Response, ex: Exception, params: dict
) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}
