import json

import pytest

from bitdata.cli import main

FOO_SCHEMA = {
    "root": "Foo",
    "records": {
        "Foo": {"fields": [
            {"name": "something", "type": "bits", "width": 5},
            {"name": "other", "type": "bits", "width": 3},
            {"name": "bools", "type": "repeat", "count": 7, "element": {"type": "bits", "width": 1}},
        ]},
        "Tail": {"fields": [
            {"name": "items", "type": "loop", "element": {"type": "bits", "width": 4}, "while": {"ne": 0}},
        ]},
    },
}


@pytest.fixture
def schema_path(tmp_path):
    p = tmp_path / "schema.json"
    p.write_text(json.dumps(FOO_SCHEMA), encoding="utf-8")
    return str(p)


def test_decode_bits_literal(schema_path, capsys):
    rc = main(["decode", schema_path, "000011000000010", "--format", "bits"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["value"] == {"something": 1, "other": 4, "bools": [0, 0, 0, 0, 0, 1, 0]}
    assert out["end"] == 15
    assert out["consumed"] == 15


def test_decode_binary_file_with_root(schema_path, tmp_path, capsys):
    data = tmp_path / "data.bin"
    data.write_bytes(bytes([0x12, 0x30]))
    rc = main(["decode", schema_path, str(data), "--root", "Tail"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["value"] == {"items": [1, 2, 3]}
    assert out["end"] == 12


def test_decode_all_hex(schema_path, capsys):
    rc = main(["decode", schema_path, "0c04 0c04", "--format", "hex", "--bit-length", "30", "--all"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert [r["start"] for r in out] == [0, 15]
    assert [r["value"]["other"] for r in out] == [4, 6]


def test_decode_out_of_range_is_an_error(schema_path, capsys):
    rc = main(["decode", schema_path, "0000", "--format", "bits"])
    assert rc == 1
    assert "underrun" in capsys.readouterr().err


def test_cyclic_schema_is_an_error(tmp_path, capsys):
    p = tmp_path / "cycle.json"
    p.write_text(json.dumps({"records": {"Node": {"fields": [
        {"name": "next", "type": "record", "ref": "Node"},
    ]}}}), encoding="utf-8")
    assert main(["info", str(p)]) == 1
    assert "cycle" in capsys.readouterr().err


def test_missing_files_are_errors(schema_path, tmp_path, capsys):
    assert main(["decode", schema_path, str(tmp_path / "missing.bin")]) == 1
    assert "missing.bin" in capsys.readouterr().err
    assert main(["info", str(tmp_path / "missing.json")]) == 1
    assert "missing.json" in capsys.readouterr().err


def test_info(schema_path, capsys):
    assert main(["info", schema_path]) == 0
    out = capsys.readouterr().out
    assert "Foo: 15 bits" in out
    assert "Tail: variable" in out
    assert "bools" in out


def test_usage_error():
    with pytest.raises(SystemExit) as ei:
        main([])
    assert ei.value.code == 2
