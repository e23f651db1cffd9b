import json
import os

import pytest

from twirp_swagger.config import WriterConfig
from twirp_swagger.main import build_parser, generate, generate_directory, main, output_path


SERVICE_PROTO = """\
syntax = "proto3";
package shop;

import "shop/types.proto";

service CartService {
    rpc AddItem(shop.Item) returns (shop.Item);
}
"""

TYPES_PROTO = """\
syntax = "proto3";
package shop;

message Item {
    string sku = 1;
    int32 quantity = 2;
}
"""


@pytest.fixture
def proto_root(tmp_path):
    root = tmp_path / "protos"
    (root / "shop").mkdir(parents=True)
    (root / "shop" / "cart.proto").write_text(SERVICE_PROTO)
    (root / "shop" / "types.proto").write_text(TYPES_PROTO)
    return root


class TestGenerate:
    def test_single_file(self, proto_root, tmp_path):
        out = tmp_path / "cart.swagger.json"
        config = WriterConfig(hostname="api.example.com", version="v1", proto_dir=str(proto_root))
        generate("shop/cart.proto", str(out), config)

        doc = json.loads(out.read_text())
        assert list(doc["paths"]) == ["/cart/shop.CartService/AddItem"]
        assert sorted(doc["definitions"]) == ["shop.Item"]

    def test_output_must_differ_from_input(self, proto_root):
        config = WriterConfig(hostname="api.example.com", proto_dir=str(proto_root))
        with pytest.raises(ValueError):
            generate("shop/cart.proto", str(proto_root / "shop" / "cart.proto"), config)

    def test_directory_skips_files_without_services(self, proto_root, tmp_path):
        out_dir = tmp_path / "out"
        config = WriterConfig(hostname="api.example.com", version="v1")
        generated = generate_directory(str(proto_root), str(out_dir), config)

        assert generated == [str(out_dir / "shop" / "cart.swagger.json")]
        assert os.listdir(out_dir / "shop") == ["cart.swagger.json"]
        # imports resolve against the directory root
        doc = json.loads((out_dir / "shop" / "cart.swagger.json").read_text())
        assert "shop.Item" in doc["definitions"]
        # the caller's config is left untouched
        assert config.proto_dir == ""

    def test_directory_keeps_same_named_files_apart(self, tmp_path):
        root = tmp_path / "protos"
        for package in ("alpha", "beta"):
            (root / package).mkdir(parents=True)
            (root / package / "orders.proto").write_text(
                f"package {package};\n"
                "service OrderService { rpc Get(Req) returns (Resp); }\n"
                "message Req {}\nmessage Resp {}\n"
            )
        out_dir = tmp_path / "out"
        config = WriterConfig(hostname="api.example.com", version="v1")
        generated = generate_directory(str(root), str(out_dir), config)

        assert generated == [
            str(out_dir / "alpha" / "orders.swagger.json"),
            str(out_dir / "beta" / "orders.swagger.json"),
        ]
        for package in ("alpha", "beta"):
            doc = json.loads((out_dir / package / "orders.swagger.json").read_text())
            assert list(doc["paths"]) == [f"/order/{package}.OrderService/Get"]

    def test_output_path(self):
        assert output_path("protos", "protos/a/orders.proto", "out") == os.path.join(
            "out", "a", "orders.swagger.json"
        )
        assert output_path("protos", "protos/top.proto", "out") == os.path.join("out", "top.swagger.json")


class TestCli:
    def test_parser_defaults(self):
        args = build_parser().parse_args(["--in", "a.proto", "--out", "a.json"])
        assert args.input == "a.proto"
        assert args.host == "api.example.com"
        assert args.path_prefix == "/twirp"
        assert args.api_version == ""
        assert args.verbose is False

    def test_single_file(self, proto_root, tmp_path, capsys):
        out = tmp_path / "cart.json"
        code = main([
            "--in", "shop/cart.proto",
            "--out", str(out),
            "--proto-dir", str(proto_root),
            "--version", "v3",
            "--host", "shop.example.com",
        ])
        assert code == 0
        assert f"Generated: {out}" in capsys.readouterr().out

        doc = json.loads(out.read_text())
        assert doc["host"] == "shop.example.com"
        assert doc["info"]["version"] == "v3"

    def test_directory(self, proto_root, tmp_path, capsys):
        out_dir = tmp_path / "docs"
        assert main(["--in", str(proto_root), "--out", str(out_dir)]) == 0
        assert "cart.swagger.json" in capsys.readouterr().out

    def test_no_service_is_an_error(self, proto_root, tmp_path, capsys):
        code = main([
            "--in", "shop/types.proto",
            "--out", str(tmp_path / "types.json"),
            "--proto-dir", str(proto_root),
        ])
        assert code == 1
        assert "no service definition found" in capsys.readouterr().err
        assert not (tmp_path / "types.json").exists()

    def test_missing_input(self, tmp_path, capsys):
        code = main(["--in", str(tmp_path / "missing.proto"), "--out", str(tmp_path / "x.json")])
        assert code == 1
        assert capsys.readouterr().err.startswith("error:")

    def test_empty_host(self, tmp_path, capsys):
        code = main(["--in", "a.proto", "--out", str(tmp_path / "a.json"), "--host", ""])
        assert code == 1
        assert "--host" in capsys.readouterr().err
