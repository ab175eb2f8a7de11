"""Tests for error formatting."""

from os import linesep

import pytest
import yaml

from testscript_plan.errors import (
    CapabilityTableError,
    CyclicRequirement,
    ErrorContext,
    ErrorFormatter,
    PlanError,
    UnknownInteraction,
    UnsatisfiableRequirement,
)


def test_format_without_context() -> None:
    """Keep the bare message when no context is given."""
    assert ErrorFormatter.format('Boom') == 'Boom'
    assert ErrorFormatter.format('Boom', ErrorContext()) == 'Boom'


def test_format_full_context() -> None:
    """Render location, interaction, and the failing element."""
    message = ErrorFormatter.format('Boom', ErrorContext(
        filename='table.yaml',
        line_num=2,
        column_num=4,
        interaction='read',
        element={'fetch': 'maybe'},
    ))

    assert message.splitlines() == [
        'Boom',
        '    in "table.yaml", line 3, column 5',
        '    on interaction "read"',
        '         ...',
        '        fetch: maybe',
    ]


@pytest.mark.parametrize('context, lines', (
    pytest.param(ErrorContext(filename='table.yaml'), ['  in "table.yaml"'], id='file only'),
    pytest.param(
        ErrorContext(line_num=0),
        ['  in "<unicode string>", line 1'],
        id='line only',
    ),
    pytest.param(ErrorContext(interaction='read'), ['  on interaction "read"'], id='interaction'),
    pytest.param(ErrorContext(element=['id']), [], id='no location'),
))
def test_location_string(context: ErrorContext, lines: list[str]) -> None:
    """Render only the location parts present in the context."""
    location = ErrorFormatter.get_location_string(context, indent=2)

    assert location.splitlines() == lines
    assert not location or location.endswith(linesep)


def test_yaml_error_snippet() -> None:
    """Render the parser snippet for YAML syntax errors."""
    with pytest.raises(yaml.MarkedYAMLError) as error:
        yaml.safe_load('interactions: [')

    table_error = CapabilityTableError.from_yaml_error(error.value)

    assert table_error.message.startswith('Invalid YAML')
    assert table_error.context is not None
    assert table_error.context['error'] is error.value
    assert 'in "<unicode string>"' in str(table_error)


def test_error_hierarchy() -> None:
    """Derive all library errors from the common base."""
    for error in (
        UnknownInteraction('patch'),
        UnsatisfiableRequirement('id'),
        CyclicRequirement(('a', 'a')),
        CapabilityTableError('Invalid'),
    ):
        assert isinstance(error, PlanError)

    assert isinstance(UnknownInteraction('patch'), LookupError)


def test_unsatisfiable_without_interaction() -> None:
    """Omit the interaction line when it is unknown."""
    assert str(UnsatisfiableRequirement('resource')) == (
        "No interaction can satisfy requirement 'resource'"
    )
