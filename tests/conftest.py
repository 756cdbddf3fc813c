"""Shared pytest fixtures for erlidl tests."""

from pathlib import Path

import pytest

from erlidl.core import ir


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "unit" / "fixtures"


@pytest.fixture
def program_ref() -> ir.ProgramRef:
    return ir.ProgramRef(name="tutorial")


@pytest.fixture
def i32() -> ir.BaseType:
    return ir.base("i32")


@pytest.fixture
def point(program_ref: ir.ProgramRef, i32: ir.BaseType) -> ir.StructType:
    """Point{1: required i32 x; 2: required i32 y}"""
    return ir.StructType(
        name="Point",
        program=program_ref,
        fields=[
            ir.FieldSpec(id=1, name="x", requiredness=ir.Requiredness.REQUIRED, type=i32),
            ir.FieldSpec(id=2, name="y", requiredness=ir.Requiredness.REQUIRED, type=i32),
        ],
    )


@pytest.fixture
def operation(program_ref: ir.ProgramRef) -> ir.EnumType:
    return ir.EnumType(
        name="Operation",
        program=program_ref,
        values=[
            ir.EnumValue(name="ADD", value=1),
            ir.EnumValue(name="SUBTRACT", value=2),
            ir.EnumValue(name="MULTIPLY", value=3),
            ir.EnumValue(name="DIVIDE", value=4),
        ],
    )


@pytest.fixture
def work(program_ref: ir.ProgramRef, i32: ir.BaseType, operation: ir.EnumType) -> ir.StructType:
    return ir.StructType(
        name="Work",
        program=program_ref,
        fields=[
            ir.FieldSpec(id=1, name="num1", type=i32, default=ir.IntValue(value=0)),
            ir.FieldSpec(id=2, name="num2", type=i32),
            ir.FieldSpec(id=3, name="op", type=operation),
            ir.FieldSpec(
                id=4,
                name="comment",
                requiredness=ir.Requiredness.OPTIONAL,
                type=ir.base("string"),
            ),
        ],
    )


@pytest.fixture
def invalid_operation(program_ref: ir.ProgramRef, i32: ir.BaseType) -> ir.StructType:
    return ir.StructType(
        name="InvalidOperation",
        program=program_ref,
        is_exception=True,
        fields=[
            ir.FieldSpec(id=1, name="whatOp", type=i32),
            ir.FieldSpec(id=2, name="why", type=ir.base("string")),
        ],
    )
