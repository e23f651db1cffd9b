import logging

import pytest

from twirp_swagger.comments import description
from twirp_swagger.generator.context import TranslationContext
from twirp_swagger.generator.service_translator import (
    InvalidRPCParentError,
    route_for,
    translate_rpc,
    translate_service,
)
from twirp_swagger.parser.proto_ast import RPC, Comment, Message, Service
from twirp_swagger.parser.proto_loader import parse_proto_text


def _service(proto: str) -> Service:
    return next(e for e in parse_proto_text(proto).elements if isinstance(e, Service))


class TestRoutes:
    def test_route_convention(self):
        assert route_for("OrderService", "orders", "GetOrder") == "/order/orders.OrderService/GetOrder"

    def test_every_service_substring_is_removed(self):
        assert route_for("ServiceRegistryService", "reg", "List") == "/registry/reg.ServiceRegistryService/List"
        assert route_for("Admin", "admin.v1", "Ping") == "/admin/admin.v1.Admin/Ping"


class TestTranslateService:
    def test_tags_are_unique(self):
        context = TranslationContext(current_package="orders")
        service = _service("// Manages orders; ignored\nservice OrderService {}")
        translate_service(service, context)
        translate_service(service, context)
        assert [t.to_dict() for t in context.tags] == [
            {"name": "OrderService", "description": "Manages orders"},
        ]


class TestTranslateRpc:
    def test_operation(self):
        context = TranslationContext(current_package="orders")
        service = _service("""\
service OrderService {
    // Get one order.
    // Returns 404 when missing.
    rpc GetOrder(GetOrderRequest) returns (Order);
}
""")
        route = translate_rpc(service.elements[0], context)
        assert route == "/order/orders.OrderService/GetOrder"
        assert context.paths[route].to_dict() == {
            "post": {
                "operationId": "GetOrder",
                "tags": ["OrderService"],
                "summary": "Get one order.\nReturns 404 when missing.",
                "parameters": [
                    {
                        "name": "body",
                        "in": "body",
                        "required": True,
                        "schema": {"$ref": "#/definitions/orders.GetOrderRequest"},
                    }
                ],
                "responses": {
                    "200": {
                        "description": "A successful response.",
                        "schema": {"$ref": "#/definitions/orders.Order"},
                    }
                },
            }
        }

    def test_qualified_request_types_are_kept(self):
        context = TranslationContext(current_package="orders")
        service = _service("service S { rpc Ping(google.protobuf.Empty) returns (common.Pong); }")
        route = translate_rpc(service.elements[0], context)
        operation = context.paths[route]
        assert operation.request_type == "google.protobuf.Empty"
        assert operation.response_type == "common.Pong"

    def test_same_route_overwrites(self):
        context = TranslationContext(current_package="orders")
        first = _service("service OrderService { rpc Get(A) returns (B); }")
        second = _service("service OrderService { rpc Get(C) returns (D); }")
        translate_rpc(first.elements[0], context)
        translate_rpc(second.elements[0], context)
        assert len(context.paths) == 1
        assert next(iter(context.paths.values())).request_type == "orders.C"

    def test_parent_must_be_a_service(self):
        context = TranslationContext(current_package="orders")
        rpc = RPC(name="Get", request_type="A", returns_type="B", parent=Message(name="NotAService"))
        with pytest.raises(InvalidRPCParentError):
            translate_rpc(rpc, context)

    def test_summary_uses_description_rules(self):
        comment = Comment(lines=[" Fetch; example"])
        rpc = RPC(name="Fetch", request_type="A", returns_type="B", comment=comment, parent=Service(name="S"))
        context = TranslationContext(current_package="p")
        translate_rpc(rpc, context)
        assert context.paths["/s/p.S/Fetch"].summary == description(comment) == "Fetch"

    def test_trailing_comment_is_the_summary_fallback(self):
        context = TranslationContext(current_package="orders")
        service = _service("""\
service OrderService {
    rpc Cancel(CancelRequest) returns (Order); // Cancel an order; ignored
    // Leading wins
    rpc Close(CloseRequest) returns (Order); // trailing
}
""")
        cancel = translate_rpc(service.elements[0], context)
        close = translate_rpc(service.elements[1], context)
        assert context.paths[cancel].summary == "Cancel an order"
        assert context.paths[close].summary == "Leading wins"

    def test_streaming_rpc_is_documented_with_a_warning(self, caplog):
        context = TranslationContext(current_package="orders")
        service = _service("service OrderService { rpc Watch(stream Req) returns (stream Order); }")
        with caplog.at_level(logging.WARNING):
            route = translate_rpc(service.elements[0], context)
        assert route == "/order/orders.OrderService/Watch"
        assert "rpc OrderService.Watch streams" in caplog.text

    def test_unary_rpc_logs_nothing(self, caplog):
        context = TranslationContext(current_package="orders")
        service = _service("service OrderService { rpc Get(Req) returns (Order); }")
        with caplog.at_level(logging.WARNING):
            translate_rpc(service.elements[0], context)
        assert caplog.text == ""
