from __future__ import annotations

import logging

from twirp_swagger.comments import description
from twirp_swagger.generator.context import TranslationContext
from twirp_swagger.models import Operation, Tag
from twirp_swagger.parser.proto_ast import RPC, Service

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """Base class for errors raised while translating a proto file."""


class InvalidRPCParentError(TranslationError):
    """Raised when an RPC is not declared inside a service."""


def translate_service(service: Service, context: TranslationContext) -> None:
    """Register ``service`` as a tag, once per service name."""
    if any(tag.name == service.name for tag in context.tags):
        return
    context.tags.append(Tag(name=service.name, description=description(service.comment)))


def route_for(service_name: str, package: str, rpc_name: str) -> str:
    """Return ``/<base>/<package>.<Service>/<RPC>``.

    ``base`` is the lower-cased service name with every "service" removed,
    so FooService is served below /foo.
    """
    base = service_name.lower().replace("service", "")
    return f"/{base}/{package}.{service_name}/{rpc_name}"


def translate_rpc(rpc: RPC, context: TranslationContext) -> str:
    """Add the POST operation of ``rpc`` to the context and return its route."""
    parent = rpc.parent
    if not isinstance(parent, Service):
        raise InvalidRPCParentError(f"rpc {rpc.name}: parent is not a service")

    if rpc.streams_request or rpc.streams_returns:
        # Twirp serves unary calls only
        logger.warning("rpc %s.%s streams, documenting it as a unary call", parent.name, rpc.name)

    route = route_for(parent.name, context.current_package, rpc.name)
    context.paths[route] = Operation(
        operation_id=rpc.name,
        tag=parent.name,
        summary=description(rpc.comment or rpc.inline_comment),
        request_type=context.qualify(rpc.request_type),
        response_type=context.qualify(rpc.returns_type),
    )
    return route
