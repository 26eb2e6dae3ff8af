"""Tests for loading payloads and dumping schema instances."""

import datetime
import io
import json
import pathlib
import typing

import pytest

from sw_schema import IsDefined, IsOptional, LoadFromFileException, Max, Schema, ValidateNested, serialization


class Point(Schema):
    x: typing.Annotated[int, IsDefined(), Max(100)]
    y: typing.Annotated[int, IsDefined()]

    def __init__(self):
        super().__init__("x", "y")


class Shape(Schema):
    name: typing.Annotated[str, IsDefined()]
    points: typing.Annotated[typing.List[Point], IsOptional(), ValidateNested()]

    def __init__(self):
        super().__init__("name", "created", {"points": [Point]})


class TestLoad:
    def test_json_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "shape.json"
        path.write_text('{"name": "line", "points": [{"x": 1, "y": 2}]}', encoding="utf-8")
        shape = Shape.from_schema(serialization.load_from_file(str(path)))
        assert shape.points[0].y == 2

    @pytest.mark.parametrize("extension", [".yaml", ".yml"])
    def test_yaml_file(self, tmp_path: pathlib.Path, extension: str) -> None:
        path = tmp_path / ("shape" + extension)
        path.write_text("name: line\npoints:\n  - x: 1\n    y: 2\n", encoding="utf-8")
        assert serialization.load_from_file(str(path)) == {"name": "line", "points": [{"x": 1, "y": 2}]}

    def test_unsupported_extension(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "shape.txt"
        path.write_text("name: line", encoding="utf-8")
        with pytest.raises(LoadFromFileException) as e:
            serialization.load_from_file(str(path))
        assert "shape.txt" in str(e.value)
        assert e.value.kind == "load_from_file"

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(LoadFromFileException):
            serialization.load_from_file(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{name", encoding="utf-8")
        with pytest.raises(LoadFromFileException) as e:
            serialization.load_from_file(str(path))
        assert isinstance(e.value.__cause__, json.JSONDecodeError)

    def test_stream(self) -> None:
        assert serialization.load_from_stdin(io.StringIO('{"name": "line"}')) == {"name": "line"}

    def test_invalid_stream(self) -> None:
        with pytest.raises(LoadFromFileException):
            serialization.load_from_stdin(io.StringIO("name: [line"))


class TestDump:
    def test_json_uses_to_json(self) -> None:
        shape = Shape.from_schema({"name": "line", "points": [{"x": 1, "y": 2}], "extra": 1})
        assert json.loads(serialization.dumps_json(shape)) == {"name": "line", "points": [{"x": 1, "y": 2}]}

    def test_json_dates(self) -> None:
        shape = Shape.from_schema({"name": "line"})
        shape.created = datetime.datetime(2015, 5, 5, 14, 56, 43, 854000, tzinfo=datetime.timezone.utc)
        assert json.loads(serialization.dumps_json(shape))["created"] == "2015-05-05T14:56:43.854Z"
        assert serialization.dumps_json(datetime.date(2015, 5, 5)) == '"2015-05-05"'

    def test_json_rejects_unknown_objects(self) -> None:
        with pytest.raises(TypeError):
            serialization.dumps_json(object())

    def test_yaml_keeps_declaration_order(self) -> None:
        shape = Shape.from_schema({"points": [{"y": 2, "x": 1}], "name": "line"})
        assert serialization.dumps_yaml(shape) == "name: line\npoints:\n- x: 1\n  y: 2\n"


class TestObjectSerialization:
    def test_valid_sample(self) -> None:
        serialization.check_object_serialization(Shape().populate({"name": "line", "points": [{"x": 1, "y": 2}]}))

    def test_invalid_sample_raises(self) -> None:
        with pytest.raises(serialization.SerializationTestFailure) as e:
            serialization.check_object_serialization(Shape().populate({"points": [{"x": 101, "y": 2}]}))
        assert "Your object serialization test for Shape failed" in str(e.value)
        assert "points.0.x" in str(e.value)

    def test_invalid_sample_calls_fail(self) -> None:
        reports = []
        serialization.check_object_serialization(Point().populate({"x": 1}), reports.append)
        assert len(reports) == 1
        assert "Point" in reports[0]
