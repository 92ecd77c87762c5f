import json

import pytest

import subdoc
from subdoc import (ExtractError, FileRecord, SubdocConfig, extract_json_value,
                    find_contained, load_files)


def record(name, content):
    return FileRecord(name, content, content)


def test_find_contained_orders_longest_first():
    a = record("a", b"hello world")
    b = record("b", b"world")
    pairs = find_contained([b, a])
    assert [(c.name, [r.name for r in rs]) for c, rs in pairs] == [
        ("a", ["b"]),
        ("b", []),
    ]


def test_find_contained_equal_length_and_identical():
    a = record("a", b"abc")
    b = record("b", b"abc")
    c = record("c", b"xyz")
    pairs = find_contained([a, b, c])
    assert [(c.name, [r.name for r in rs]) for c, rs in pairs] == [
        ("a", ["b"]),
        ("b", []),
        ("c", []),
    ]


def test_find_contained_not_contained():
    pairs = find_contained([record("a", b"abcdef"), record("b", b"xyz")])
    assert pairs[0][1] == []


def test_extract_json_value():
    data = json.dumps({"body": "hello", "n": {"x": 1}}).encode()
    assert extract_json_value(data, "body", "f") == b"hello"
    assert extract_json_value(data, "n", "f") == b'{"x":1}'


@pytest.mark.parametrize("data", [b"not json", b"[1, 2]", b'{"other": 1}'])
def test_extract_json_value_errors(data):
    with pytest.raises(ExtractError, match="f.json"):
        extract_json_value(data, "body", "f.json")


def test_load_files_with_json_key(tmp_path):
    path = tmp_path / "a.json"
    path.write_text(json.dumps({"body": "text", "id": 7}))
    [loaded] = load_files(SubdocConfig(files=(str(path),), json_key="body"))
    assert loaded.comparable == b"text"
    assert loaded.raw == path.read_bytes()


def test_main_reports_containment(tmp_path, capsys):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_bytes(b"hello world")
    b.write_bytes(b"world")
    subdoc.main([str(b), str(a)])
    assert capsys.readouterr().out.splitlines() == [
        f"      11 {a}",
        f"           {b}",
        f"       5 {b}",
    ]


def test_main_json_key(tmp_path, capsys):
    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    a.write_text(json.dumps({"body": "the quick brown fox", "id": 1}))
    b.write_text(json.dumps({"body": "quick brown", "id": 22222222}))
    subdoc.main(["--json-key", "body", str(a), str(b)])
    assert capsys.readouterr().out.splitlines() == [
        f"      19 {a} (body)",
        f"           {b}",
        f"      11 {b} (body)",
    ]


@pytest.mark.parametrize("count", [0, 1])
def test_main_too_few_files(tmp_path, capsys, count):
    files = []
    for i in range(count):
        path = tmp_path / f"{i}.txt"
        path.write_text("content")
        files.append(str(path))
    subdoc.main(files)
    assert capsys.readouterr().out == ""


def test_main_missing_key_is_fatal(tmp_path, capsys):
    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    a.write_text(json.dumps({"body": "x"}))
    b.write_text(json.dumps({"title": "x"}))
    with pytest.raises(SystemExit) as exc:
        subdoc.main(["--json-key", "body", str(a), str(b)])
    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "b.json" in captured.err


def test_main_missing_file_is_fatal(tmp_path, capsys):
    a = tmp_path / "a.txt"
    a.write_text("x")
    with pytest.raises(SystemExit) as exc:
        subdoc.main([str(a), str(tmp_path / "gone.txt")])
    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "gone.txt" in captured.err


def test_main_json_key_with_lone_surrogate(tmp_path, capsys):
    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    a.write_text('{"body": "x\\ud800y"}')
    b.write_text('{"body": "y"}')
    subdoc.main(["--json-key", "body", str(a), str(b)])
    assert capsys.readouterr().out.splitlines() == [
        f"       5 {a} (body)",
        f"           {b}",
        f"       1 {b} (body)",
    ]
