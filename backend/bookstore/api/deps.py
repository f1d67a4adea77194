"""Dependencies resolving the process-wide services created in the lifespan."""

from starlette.requests import HTTPConnection

from bookstore.services.broadcast import BroadcastHub
from bookstore.services.enrichment import EnrichmentGateway


def get_gateway(conn: HTTPConnection) -> EnrichmentGateway:
    return conn.app.state.gateway


def get_hub(conn: HTTPConnection) -> BroadcastHub:
    return conn.app.state.hub
