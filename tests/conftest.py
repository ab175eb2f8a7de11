"""Tests configurations and fixtures."""

from itertools import count
from typing import TYPE_CHECKING, Any

import pytest

from testscript_plan.capabilities import CapabilityTable
from testscript_plan.compiler import PlanCompiler
from testscript_plan.settings import CompilerSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from testscript_plan.identifiers import Allocator


@pytest.fixture
def table() -> CapabilityTable:
    """Provide a fresh built-in capability table."""
    return CapabilityTable.builtin()


@pytest.fixture
def allocator() -> 'Allocator':
    """Provide a deterministic identifier allocator.

    Response ids are handed out as `response1`, `response2`, ... and
    variable names as `variable1`, `variable2`, ... so compiled plans
    can be compared field by field.

    Returns:
        An allocator with independent counters for both identifier kinds.
    """
    class CountingAllocator:
        def __init__(self) -> None:
            self.responses = count(1)
            self.variables = count(1)

        def fresh_response_id(self) -> str:
            return f'response{next(self.responses)}'

        def fresh_variable_name(self) -> str:
            return f'variable{next(self.variables)}'

    return CountingAllocator()


@pytest.fixture
def settings() -> CompilerSettings:
    """Provide default compiler settings independent of the environment."""
    return CompilerSettings.model_construct(**{
        name: field.default
        for name, field in CompilerSettings.model_fields.items()
    })


@pytest.fixture
def compiler(table: CapabilityTable, settings: CompilerSettings,
             allocator: 'Allocator') -> PlanCompiler:
    """Provide a compiler over the built-in table with predictable identifiers."""
    return PlanCompiler(table, settings=settings, allocator=allocator)


@pytest.fixture
def make_compiler(settings: CompilerSettings,
                  allocator: 'Allocator') -> 'Callable[[dict[str, Any]], PlanCompiler]':
    """Provide a factory of compilers over custom capability tables.

    The factory accepts raw interaction definitions in the YAML format
    and adds a bare `delete` teardown interaction unless one is given.
    """
    def make(interactions: dict[str, Any], **kwargs: Any) -> PlanCompiler:  # noqa: ANN401
        definitions = {'delete': {'mutatesState': True}, **interactions}
        table = CapabilityTable.from_mapping({'interactions': definitions, **kwargs})

        return PlanCompiler(table, settings=settings, allocator=allocator)

    return make
