import json
import logging
import os
import shutil
import tempfile

import pytest

from twirp_swagger.config import WriterConfig
from twirp_swagger.generator.swagger_writer import NoServiceDefinitionError, SwaggerWriter
from twirp_swagger.parser.proto_ast_parser import ProtoParseError
from twirp_swagger.parser.proto_loader import parse_proto_text


ORDERS_PROTO = """\
syntax = "proto3";

package orders;

import "google/protobuf/timestamp.proto";
import "common/money.proto";

// Order management.
service OrderService {
    // Fetch one order
    rpc GetOrder(GetOrderRequest) returns (Order);
}

message GetOrderRequest {
    // Order id; 42
    int64 id = 1;
}

// Order; an order
message Order {
    int64 id = 1;
    common.Money total = 2;
    google.protobuf.Timestamp created_at = 3;
}
"""

MONEY_PROTO = """\
syntax = "proto3";
package common;

message Money {
    string currency = 1;
    int64 units = 2;
}
"""


class TestSwaggerWriter:
    def setup_method(self):
        self.proto_dir = tempfile.mkdtemp()
        self._write("orders.proto", ORDERS_PROTO)
        self._write("common/money.proto", MONEY_PROTO)
        self.config = WriterConfig(
            hostname="api.example.com",
            version="v1",
            proto_dir=self.proto_dir,
            template_dir=os.path.join(self.proto_dir, "templates"),
        )

    def teardown_method(self):
        shutil.rmtree(self.proto_dir)

    def _write(self, name: str, content: str) -> None:
        path = os.path.join(self.proto_dir, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(content)

    def _document(self, filename: str = "orders.proto") -> dict:
        writer = SwaggerWriter(filename, self.config)
        writer.walk_file()
        return json.loads(writer.get())

    def test_header(self):
        doc = self._document()
        assert doc["swagger"] == "2.0"
        assert doc["host"] == "api.example.com"
        assert doc["schemes"] == ["https"]
        assert doc["produces"] == ["application/json"]
        assert doc["consumes"] == ["application/json"]
        assert doc["security"] == [{"oauth": []}]

        oauth = doc["securityDefinitions"]["oauth"]
        assert oauth["type"] == "oauth2"
        assert oauth["flow"] == "application"
        assert oauth["tokenUrl"] == "api.example.com/auth"
        assert oauth["scopes"] == {}
        assert "client credentials" in oauth["description"]

    def test_info(self):
        info = self._document()["info"]
        assert info["title"] == "orders.proto"
        assert info["version"] == "v1"
        # no template file for this proto
        assert "description" not in info
        assert info["x-logo"] == {
            "url": "https://storage.googleapis.com/compass-public-docs/compass_logo.png",
            "altText": "Compass IoT logo",
        }

    def test_paths_tags_and_definitions(self):
        doc = self._document()
        assert list(doc["paths"]) == ["/order/orders.OrderService/GetOrder"]
        post = doc["paths"]["/order/orders.OrderService/GetOrder"]["post"]
        assert post["operationId"] == "GetOrder"
        assert post["tags"] == ["OrderService"]
        assert post["summary"] == "Fetch one order"
        assert doc["tags"] == [{"name": "OrderService", "description": "Order management."}]

        assert sorted(doc["definitions"]) == ["common.Money", "orders.GetOrderRequest", "orders.Order"]
        order = doc["definitions"]["orders.Order"]
        assert order["title"] == "Order"
        assert order["example"] == "an order"
        assert order["properties"]["total"]["$ref"] == "#/definitions/common.Money"
        assert order["properties"]["created_at"]["format"] == "date-time"

    def test_output_is_deterministic(self):
        first = SwaggerWriter("orders.proto", self.config)
        first.walk_file()
        second = SwaggerWriter("orders.proto", self.config)
        second.walk_file()
        assert first.get() == second.get()

    def test_walk_can_be_repeated(self):
        writer = SwaggerWriter("orders.proto", self.config)
        writer.walk_file()
        before = writer.get()
        writer.walk_file()
        assert writer.get() == before

    def test_save(self):
        writer = SwaggerWriter("orders.proto", self.config)
        writer.walk_file()
        out = os.path.join(self.proto_dir, "orders.swagger.json")
        writer.save(out)
        with open(out, "rb") as f:
            assert f.read() == writer.get()

    def test_missing_import_still_produces_document(self):
        self._write("lonely.proto", """\
package lonely;
import "nowhere/missing.proto";
service PingService { rpc Ping(Req) returns (Resp); }
message Req {}
message Resp {}
""")
        doc = self._document("lonely.proto")
        assert list(doc["paths"]) == ["/ping/lonely.PingService/Ping"]
        assert sorted(doc["definitions"]) == ["lonely.Req", "lonely.Resp"]

    def test_service_without_rpcs(self):
        self._write("empty.proto", "package empty;\nservice EmptyService {}\nmessage Unused {}\n")
        with pytest.raises(NoServiceDefinitionError) as excinfo:
            self._document("empty.proto")
        assert excinfo.value.filename == "empty.proto"

    def test_messages_only(self):
        with pytest.raises(NoServiceDefinitionError):
            self._document("common/money.proto")

    def test_root_file_errors_propagate(self):
        with pytest.raises(OSError):
            self._document("missing.proto")

        self._write("broken.proto", "service S { rpc A( }")
        with pytest.raises(ProtoParseError):
            self._document("broken.proto")

    def test_walk_parsed_definition_without_package(self):
        definition = parse_proto_text("service Echo { rpc Say(Msg) returns (Msg); }\nmessage Msg {}")
        writer = SwaggerWriter("echo.proto", self.config)
        writer.walk(definition)
        doc = writer.to_dict()
        assert doc["host"] == "api.example.com"
        assert list(doc["paths"]) == ["/echo/.Echo/Say"]
        assert list(doc["definitions"]) == ["Msg"]

    def test_unknown_elements_are_logged_and_skipped(self, caplog):
        class Extension:
            pass

        definition = parse_proto_text("""\
package demo;
// a detached note

option go_package = "example.com/demo";
message Msg { string a = 1; }
service Echo { rpc Say(Msg) returns (Msg); }
""")
        definition.elements.append(Extension())
        writer = SwaggerWriter("demo.proto", self.config)
        with caplog.at_level(logging.DEBUG, logger="twirp_swagger.generator.swagger_writer"):
            writer.walk(definition)

        messages = [r.getMessage() for r in caplog.records if r.name == "twirp_swagger.generator.swagger_writer"]
        assert messages == ["demo.proto: unknown element Extension"]
        assert list(writer.to_dict()["paths"]) == ["/echo/demo.Echo/Say"]
