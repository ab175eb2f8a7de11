"""Tests for plan data structures and compilation state."""

import pydantic
import pytest

from testscript_plan.compiler import CompilationContext
from testscript_plan.names import INTERACTION_PATTERN, fixture_placeholder, resource_type_placeholder
from testscript_plan.plan import Operation, Plan, QueryParameter, VariableBinding

TEARDOWN = Operation(method='delete', params='/${variable1}', resource='${RESOURCE_TYPE_1}')


@pytest.mark.parametrize('test', (
    pytest.param((), id='empty'),
    pytest.param((TEARDOWN, TEARDOWN), id='two operations'),
))
def test_plan_single_test(test: tuple[Operation, ...]) -> None:
    """Require exactly one operation under test."""
    with pytest.raises(pydantic.ValidationError):
        Plan(test=test)


def test_plan_operation() -> None:
    """Expose the operation under test."""
    plan = Plan(test=[TEARDOWN])

    assert plan.operation == TEARDOWN
    assert plan.setup == plan.teardown == ()


def test_operation_equality() -> None:
    """Compare operations by all fields."""
    copy = Operation(method='delete', params='/${variable1}', resource='${RESOURCE_TYPE_1}')

    assert copy == TEARDOWN
    assert len({copy, TEARDOWN}) == 1
    assert TEARDOWN != Operation(method='delete', params='/${variable1}')


def test_variable_binding_unpacks() -> None:
    """Unpack bindings as name, expression, and response id."""
    name, expression, response_id = VariableBinding(
        name='variable1',
        expression='Patient.id',
        response_id='response1',
    )

    assert (name, expression, response_id) == ('variable1', 'Patient.id', 'response1')


def test_query_parameter_requires_code() -> None:
    """Reject empty query parameter codes."""
    with pytest.raises(pydantic.ValidationError):
        QueryParameter(code='')


def test_context_fixtures() -> None:
    """Number fixtures from one within a context."""
    context = CompilationContext()

    assert context.allocate_fixture() == '${EXAMPLE_RESOURCE_1}'
    assert context.allocate_fixture() == '${EXAMPLE_RESOURCE_2}'
    assert context.static_fixture_counter == 2
    assert context.fixtures == ['${EXAMPLE_RESOURCE_1}', '${EXAMPLE_RESOURCE_2}']


def test_context_teardown_deduplication() -> None:
    """Append equal teardown operations once."""
    context = CompilationContext()

    assert context.add_teardown(TEARDOWN)
    assert not context.add_teardown(TEARDOWN.model_copy())
    assert context.add_teardown(Operation(method='delete'))
    assert len(context.teardown) == 2


def test_context_freeze() -> None:
    """Freeze the collected state into an immutable plan."""
    context = CompilationContext()
    context.test.append(Operation(method='create', source_id=context.allocate_fixture()))
    context.add_teardown(TEARDOWN)

    plan = context.freeze()

    assert plan.fixtures == ('${EXAMPLE_RESOURCE_1}',)
    assert plan.teardown == (TEARDOWN,)

    context.add_teardown(Operation(method='delete'))

    assert plan.teardown == (TEARDOWN,)


def test_placeholders() -> None:
    """Render numbered placeholders."""
    assert fixture_placeholder(3) == '${EXAMPLE_RESOURCE_3}'
    assert resource_type_placeholder(3) == '${RESOURCE_TYPE_3}'


@pytest.mark.parametrize('name, valid', (
    pytest.param('read', True, id='word'),
    pytest.param('search-type', True, id='dashed'),
    pytest.param('history2', True, id='digits'),
    pytest.param('Read', False, id='uppercase'),
    pytest.param('search_type', False, id='underscore'),
    pytest.param('-read', False, id='leading dash'),
    pytest.param('read-', False, id='trailing dash'),
))
def test_interaction_names(name: str, valid: bool) -> None:
    """Accept lowercase dash-separated interaction names."""
    assert bool(INTERACTION_PATTERN.match(name)) is valid
