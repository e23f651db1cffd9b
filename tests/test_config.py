from twirp_swagger.config import DEFAULT_PATH_PREFIX, WriterConfig, parse_plugin_parameter, split_sdk_files


class TestWriterConfig:
    def test_defaults(self):
        config = WriterConfig()
        assert config.path_prefix == DEFAULT_PATH_PREFIX == "/twirp"
        assert config.sdk_files == []

    def test_sdk_files_string_is_split(self):
        config = WriterConfig(sdk_files="a.ts, b_pb2.py,,")
        assert config.sdk_files == ["a.ts", "b_pb2.py"]
        assert split_sdk_files("") == []

    def test_empty_path_prefix_uses_default(self):
        assert WriterConfig(path_prefix="").path_prefix == "/twirp"


class TestPluginParameter:
    def test_key_value_pairs(self):
        assert parse_plugin_parameter("hostname=api.example.com,version=v1") == {
            "hostname": "api.example.com",
            "version": "v1",
        }

    def test_list_values_continue_previous_key(self):
        options = parse_plugin_parameter("sdk_files=a.ts,b_pb2.py,version=v1")
        assert options["sdk_files"] == "a.ts,b_pb2.py"
        assert options["version"] == "v1"

    def test_empty_parameter(self):
        assert parse_plugin_parameter("") == {}
