"""Tests for program document loading and linking."""

import json
from pathlib import Path

import pytest

from erlidl.core import ir
from erlidl.core.errors import LinkError, LoadError
from erlidl.core.loader import load_program, parse_program


def _write(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestLoadProgram:
    def test_tutorial(self, fixtures_dir: Path) -> None:
        program = load_program(fixtures_dir / "tutorial.json")

        assert program.name == "tutorial"
        assert [s.name for s in program.structs] == ["Work", "InvalidOperation"]
        assert program.get_struct("InvalidOperation").is_exception
        assert [v.value for v in program.get_enum("Operation").values] == [1, 2, 3, 4]
        assert program.typedefs[0].target == ir.base("i32")

    def test_includes(self, fixtures_dir: Path) -> None:
        program = load_program(fixtures_dir / "tutorial.json")

        assert [p.name for p in program.includes] == ["shared"]
        shared = program.includes[0]
        assert shared.namespace == "acme.shared"
        assert shared.get_struct("SharedStruct").program == ir.ProgramRef(
            name="shared", namespace="acme.shared"
        )

    def test_service_extends_included_service(self, fixtures_dir: Path) -> None:
        program = load_program(fixtures_dir / "tutorial.json")
        calculator = program.get_service("Calculator")

        assert calculator.extends is program.includes[0].get_service("SharedService")
        assert [f.name for f in calculator.functions] == ["ping", "add", "calculate", "zip"]
        calculate = calculator.function_named("calculate")
        assert calculate.args.name == "calculate_args"
        assert calculate.exceptions.fields[0].type is program.get_struct("InvalidOperation")
        assert calculator.function_named("zip").oneway
        assert calculator.function_named("ping").returns_void

    def test_constants(self, fixtures_dir: Path) -> None:
        program = load_program(fixtures_dir / "tutorial.json")
        consts = {c.name: c for c in program.consts}

        assert consts["INT32CONSTANT"].value == ir.IntValue(value=9853)
        assert consts["DEFAULT_OP"].value == ir.IntValue(value=1)
        assert consts["MAPCONSTANT"].value.pairs[0] == (
            ir.StringValue(value="hello"),
            ir.StringValue(value="world"),
        )
        origin = consts["ORIGIN"].value
        assert isinstance(origin, ir.StructValue)
        assert origin.assignments["op"] == ir.IntValue(value=1)

    def test_field_defaults_and_requiredness(self, fixtures_dir: Path) -> None:
        work = load_program(fixtures_dir / "tutorial.json").get_struct("Work")

        assert work.fields[0].default == ir.IntValue(value=0)
        assert work.fields[3].requiredness == ir.Requiredness.OPTIONAL
        assert work.fields[2].type.kind == "enum"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="not found"):
            load_program(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(LoadError, match="Invalid JSON"):
            load_program(path)

    def test_unknown_document_key(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "p.json", {"name": "p", "unions": []})
        with pytest.raises(LoadError):
            load_program(path)

    def test_name_defaults_to_file_stem(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "inventory.json", {"enums": [{"name": "E"}]})
        assert load_program(path).name == "inventory"

    def test_include_cycle(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.json", {"name": "a", "includes": ["b.json"]})
        _write(tmp_path / "b.json", {"name": "b", "includes": ["a.json"]})
        with pytest.raises(LinkError, match="Include cycle: a.json -> b.json -> a.json"):
            load_program(tmp_path / "a.json")


class TestTypeExpressions:
    def test_nested_containers(self) -> None:
        program = parse_program(
            {
                "structs": [
                    {"name": "Point", "fields": []},
                    {
                        "name": "Shape",
                        "fields": [
                            {"id": 1, "name": "points", "type": "map<string, list<Point>>"},
                            {"id": 2, "name": "tags", "type": "set<string>"},
                        ],
                    },
                ]
            }
        )
        shape = program.get_struct("Shape")
        points = shape.fields[0].type
        assert isinstance(points, ir.MapType)
        assert points.key == ir.base("string")
        assert isinstance(points.val, ir.ListType)
        assert points.val.elem is program.get_struct("Point")
        assert shape.fields[1].type == ir.SetType(elem=ir.base("string"))

    def test_forward_reference(self) -> None:
        program = parse_program(
            {
                "typedefs": [{"name": "Ids", "type": "list<Id>"}, {"name": "Id", "type": "i64"}],
            }
        )
        ids = program.typedefs[0]
        assert ids.target == ir.ListType(elem=program.typedefs[1])

    def test_unknown_type(self) -> None:
        with pytest.raises(LinkError, match="Unknown type 'Nope'"):
            parse_program({"typedefs": [{"name": "T", "type": "list<Nope>"}]})

    def test_recursive_reference(self) -> None:
        doc = {
            "structs": [
                {"name": "Node", "fields": [{"id": 1, "name": "next", "type": "Node"}]}
            ]
        }
        with pytest.raises(LinkError, match="Recursive type reference: Node -> Node"):
            parse_program(doc)

    def test_void_field_rejected(self) -> None:
        doc = {"structs": [{"name": "S", "fields": [{"id": 1, "name": "v", "type": "void"}]}]}
        with pytest.raises(LinkError, match="void"):
            parse_program(doc)

    def test_malformed_expression(self) -> None:
        with pytest.raises(LinkError):
            parse_program({"typedefs": [{"name": "T", "type": "list<i32"}]})

    def test_duplicate_type_names(self) -> None:
        with pytest.raises(LinkError, match="declared more than once"):
            parse_program({"enums": [{"name": "T"}], "structs": [{"name": "T"}]})

    def test_includes_need_a_path(self) -> None:
        with pytest.raises(LoadError):
            parse_program({"includes": ["shared.json"]})


class TestEnums:
    def test_implicit_values_continue(self) -> None:
        program = parse_program(
            {
                "enums": [
                    {
                        "name": "Level",
                        "values": [{"name": "LOW"}, {"name": "HIGH", "value": 10}, {"name": "MAX"}],
                    }
                ]
            }
        )
        assert [v.value for v in program.get_enum("Level").values] == [0, 10, 11]

    def test_duplicate_values(self) -> None:
        doc = {"enums": [{"name": "E", "values": [{"name": "A", "value": 1}, {"name": "B", "value": 1}]}]}
        with pytest.raises(LinkError):
            parse_program(doc)


class TestConstantValues:
    def test_map_with_integer_keys(self) -> None:
        program = parse_program(
            {"consts": [{"name": "M", "type": "map<i32,string>", "value": {"1": "one"}}]}
        )
        assert program.consts[0].value.pairs == [
            (ir.IntValue(value=1), ir.StringValue(value="one"))
        ]

    def test_map_as_pair_list(self) -> None:
        program = parse_program(
            {"consts": [{"name": "M", "type": "map<i32,bool>", "value": [[1, True], [2, False]]}]}
        )
        assert program.consts[0].value.pairs[1] == (ir.IntValue(value=2), ir.BoolValue(value=False))

    def test_double_accepts_integers(self) -> None:
        program = parse_program({"consts": [{"name": "D", "type": "double", "value": 2}]})
        assert program.consts[0].value == ir.IntValue(value=2)

    def test_wrong_shape(self) -> None:
        with pytest.raises(LinkError, match="is not a valid i32"):
            parse_program({"consts": [{"name": "X", "type": "i32", "value": "ten"}]})

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(LinkError):
            parse_program({"consts": [{"name": "X", "type": "i32", "value": True}]})

    def test_unknown_enum_name(self) -> None:
        doc = {
            "enums": [{"name": "E", "values": [{"name": "A"}]}],
            "consts": [{"name": "X", "type": "E", "value": "B"}],
        }
        with pytest.raises(LinkError, match="has no value 'B'"):
            parse_program(doc)

    def test_unknown_struct_field(self) -> None:
        doc = {
            "structs": [{"name": "S", "fields": [{"id": 1, "name": "a", "type": "i32"}]}],
            "consts": [{"name": "X", "type": "S", "value": {"b": 1}}],
        }
        with pytest.raises(LinkError, match="has no field 'b'"):
            parse_program(doc)


class TestServices:
    def test_oneway_must_return_void(self) -> None:
        doc = {"services": [{"name": "S", "functions": [{"name": "f", "returns": "i32", "oneway": True}]}]}
        with pytest.raises(LinkError, match="must return void"):
            parse_program(doc)

    def test_throws_must_be_exceptions(self) -> None:
        doc = {
            "structs": [{"name": "NotAnError"}],
            "services": [
                {
                    "name": "S",
                    "functions": [
                        {"name": "f", "throws": [{"id": 1, "name": "e", "type": "NotAnError"}]}
                    ],
                }
            ],
        }
        with pytest.raises(LinkError, match="not an exception"):
            parse_program(doc)

    def test_local_parent_declared_later(self) -> None:
        program = parse_program(
            {"services": [{"name": "Child", "extends": "Base"}, {"name": "Base"}]}
        )
        assert program.get_service("Child").extends is program.get_service("Base")

    def test_unknown_parent(self) -> None:
        with pytest.raises(LinkError, match="Unknown parent service 'Missing'"):
            parse_program({"services": [{"name": "S", "extends": "Missing"}]})

    def test_inheritance_cycle(self) -> None:
        doc = {"services": [{"name": "A", "extends": "B"}, {"name": "B", "extends": "A"}]}
        with pytest.raises(LinkError, match="cycle"):
            parse_program(doc)

    def test_error_names_the_service(self) -> None:
        with pytest.raises(LinkError) as exc_info:
            parse_program({"name": "demo", "services": [{"name": "S", "extends": "Missing"}]})
        assert "service 'S' in program demo" in str(exc_info.value)


class TestDuplicateNames:
    def test_duplicate_field_names(self) -> None:
        doc = {
            "name": "p",
            "structs": [
                {
                    "name": "S",
                    "fields": [
                        {"id": 1, "name": "a", "type": "i32"},
                        {"id": 2, "name": "a", "type": "string"},
                    ],
                }
            ],
        }
        with pytest.raises(LinkError) as exc_info:
            parse_program(doc)
        assert exc_info.value.context.name == "S"
        assert "Field 'a' is declared more than once" in str(exc_info.value)

    def test_duplicate_argument_names(self) -> None:
        doc = {
            "services": [
                {
                    "name": "S",
                    "functions": [
                        {
                            "name": "f",
                            "args": [
                                {"id": 1, "name": "x", "type": "i32"},
                                {"id": 2, "name": "x", "type": "i32"},
                            ],
                        }
                    ],
                }
            ]
        }
        with pytest.raises(LinkError, match="Field 'x' is declared more than once"):
            parse_program(doc)

    def test_duplicate_function_names(self) -> None:
        doc = {
            "name": "p",
            "services": [
                {
                    "name": "S",
                    "functions": [
                        {"name": "f", "returns": "i32"},
                        {"name": "f", "returns": "string"},
                    ],
                }
            ],
        }
        with pytest.raises(LinkError) as exc_info:
            parse_program(doc)
        assert str(exc_info.value) == (
            "service 'S' in program p: Function 'f' is declared more than once"
        )

    def test_duplicate_constant_names(self) -> None:
        doc = {
            "name": "p",
            "consts": [
                {"name": "C", "type": "i32", "value": 1},
                {"name": "C", "type": "i32", "value": 2},
            ],
        }
        with pytest.raises(LinkError) as exc_info:
            parse_program(doc)
        assert str(exc_info.value) == (
            "const 'C' in program p: Constant 'C' is declared more than once"
        )
