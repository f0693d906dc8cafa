import json

import pytest

from blockcpp.compile_from_json import _workspace_name_to_filename, main


HELLO = {
    "name": "Hello World",
    "blocks": [{"type": "text_print", "inputs": {"TEXT": {"type": "text", "fields": {"TEXT": "hi"}}}}],
}

HELLO_SOURCE = "#include <iostream>\n\n\nstd::cout << 'hi' << std::endl;\n"


@pytest.fixture
def hello_json(tmp_path):
    path = tmp_path / "hello.json"
    path.write_text(json.dumps(HELLO), encoding="utf-8")
    return path


class TestCompileFromJson:

    def test_writes_cpp_file(self, hello_json, tmp_path):
        out_dir = tmp_path / "out"
        assert main([str(hello_json), "--out", str(out_dir)]) == 0

        written = out_dir / "hello_world.cpp"
        assert written.read_text(encoding="utf-8") == HELLO_SOURCE

    def test_print_only(self, hello_json, tmp_path, capsys):
        assert main([str(hello_json), "--print", "--out", str(tmp_path / "unused")]) == 0
        assert capsys.readouterr().out == HELLO_SOURCE + "\n"
        assert not (tmp_path / "unused").exists()

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json"), "--print"]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        assert main([str(path), "--print"]) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_schema_error(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        assert main([str(path), "--print"]) == 1
        assert "Schema validation failed" in capsys.readouterr().err

    def test_illegal_connection(self, tmp_path, capsys):
        path = tmp_path / "wiring.json"
        data = {"name": "x", "blocks": [{"type": "math_arithmetic", "inputs": {"A": {"type": "logic_boolean"}}}]}
        path.write_text(json.dumps(data), encoding="utf-8")
        assert main([str(path), "--print"]) == 1
        assert "Invalid workspace" in capsys.readouterr().err

    def test_strict_unknown_block(self, tmp_path, capsys):
        path = tmp_path / "mystery.json"
        path.write_text(json.dumps({"name": "x", "blocks": [{"type": "mystery"}]}), encoding="utf-8")
        assert main([str(path), "--print", "--strict"]) == 1
        assert "mystery" in capsys.readouterr().err

    def test_one_based_flag(self, tmp_path, capsys):
        data = {
            "name": "lists",
            "blocks": [{
                "type": "lists_getIndex",
                "inputs": {
                    "VALUE": {"type": "variables_get", "fields": {"VAR": "items"}},
                    "AT": {"type": "math_number", "fields": {"NUM": 2}},
                },
            }],
        }
        path = tmp_path / "lists.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        assert main([str(path), "--print"]) == 0
        assert "items[2];" in capsys.readouterr().out
        assert main([str(path), "--print", "--one-based"]) == 0
        assert "items[1];" in capsys.readouterr().out

    @pytest.mark.parametrize("name, filename", [
        ("blink", "blink.cpp"),
        ("Blink LED-demo", "blink_led_demo.cpp"),
    ])
    def test_output_filename(self, name, filename):
        assert _workspace_name_to_filename(name) == filename
