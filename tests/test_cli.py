"""Tests for the command-line interface."""

import json
from typing import TYPE_CHECKING

import pytest
import yaml
from click.testing import CliRunner

from testscript_plan.__main__ import cli

if TYPE_CHECKING:
    from pathlib import Path

CUSTOM_TABLE = """\
interactions:
  post:
    sendsBody: true
    extractsId: true
    mutatesState: true
    staticRequirements: resource
  get:
    dynamicRequirements: id
    retrievesResource: true
  remove:
    mutatesState: true
    dynamicRequirements: id
    method: delete
teardown: remove
"""


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI runner."""
    return CliRunner()


def test_compile_yaml(runner: CliRunner) -> None:
    """Print a compiled plan as YAML."""
    result = runner.invoke(cli, ['compile', 'read'])

    assert result.exit_code == 0, result.output

    plan = yaml.safe_load(result.output)

    assert [operation['method'] for operation in plan['setup']] == ['create']
    assert plan['test'][0]['method'] == 'read'
    assert plan['test'][0]['params'] == '/${{{0}}}'.format(plan['variables'][0]['name'])
    assert plan['fixtures'] == ['${EXAMPLE_RESOURCE_1}']
    assert 'source_id' not in plan['test'][0]


def test_compile_json_with_parameter(runner: CliRunner) -> None:
    """Print a compiled plan as JSON with a query parameter override."""
    result = runner.invoke(cli, [
        'compile', 'search-type',
        '--param-code', 'identifier',
        '--param-expression', 'Patient.identifier.value',
        '--format', 'json',
    ])

    assert result.exit_code == 0, result.output

    plan = json.loads(result.output)
    name = plan['variables'][0]['name']

    assert plan['test'] == [{
        'method': 'search',
        'resource': '${RESOURCE_TYPE_1}',
        'params': f'?identifier=${{{name}}}',
    }]
    assert plan['variables'][0]['expression'] == 'Patient.identifier.value'


def test_compile_explicit_setup(runner: CliRunner) -> None:
    """Replace the resolved setup chain with repeated setup options."""
    result = runner.invoke(cli, ['compile', 'read', '-s', 'create', '-s', 'create', '-f', 'json'])

    assert result.exit_code == 0, result.output
    assert len(json.loads(result.output)['setup']) == 2


@pytest.mark.parametrize('args, exit_code, message', (
    pytest.param(['compile', 'patch'], 1, "Unknown interaction 'patch'", id='unknown'),
    pytest.param(['compile', 'Read'], 2, 'not a valid interaction name', id='invalid name'),
    pytest.param(
        ['compile', 'read', '-s', 'search_type'],
        2,
        'not a valid interaction name',
        id='invalid setup name',
    ),
    pytest.param(
        ['compile', 'read', '--param-expression', 'Patient.id'],
        1,
        '--param-expression requires --param-code',
        id='expression without code',
    ),
))
def test_compile_errors(runner: CliRunner, args: list[str], exit_code: int, message: str) -> None:
    """Report compilation and usage errors."""
    result = runner.invoke(cli, args)

    assert result.exit_code == exit_code
    assert message in result.output


def test_compile_custom_table(runner: CliRunner, tmp_path: 'Path') -> None:
    """Compile with a capability table file."""
    path = tmp_path / 'interactions.yaml'
    path.write_text(CUSTOM_TABLE, encoding='utf-8')

    result = runner.invoke(cli, ['compile', 'post', '--table', str(path), '-f', 'json'])

    assert result.exit_code == 0, result.output

    plan = json.loads(result.output)

    assert plan['test'][0]['source_id'] == '${EXAMPLE_RESOURCE_1}'
    assert [operation['method'] for operation in plan['teardown']] == ['delete']


def test_invalid_table(runner: CliRunner, tmp_path: 'Path') -> None:
    """Report capability table errors with their location."""
    path = tmp_path / 'interactions.yaml'
    path.write_text('interactions:\n  delete:\n    modify: maybe\n', encoding='utf-8')

    result = runner.invoke(cli, ['compile', 'delete', '-t', str(path)])

    assert result.exit_code == 1
    assert 'Input should be a valid boolean' in result.output
    assert 'on interaction "delete"' in result.output


def test_strict_table(runner: CliRunner, tmp_path: 'Path') -> None:
    """Fail on unsatisfiable requirements only in strict mode."""
    path = tmp_path / 'interactions.yaml'
    path.write_text(
        'interactions:\n  read:\n    dynamicReq: id\n  delete:\n    modify: true\n',
        encoding='utf-8',
    )

    relaxed = runner.invoke(cli, ['interactions', '-t', str(path)])
    strict = runner.invoke(cli, ['--strict', 'interactions', '-t', str(path)])

    assert relaxed.exit_code == 0, relaxed.output
    assert "read\trequires: id\tsetup: error: No interaction can satisfy requirement 'id'" in (
        relaxed.output
    )
    assert strict.exit_code == 1
    assert "Interaction 'read' requires 'id'" in strict.output


def test_interactions(runner: CliRunner) -> None:
    """List built-in interactions with their setup chains."""
    result = runner.invoke(cli, ['interactions'])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        'create\trequires: -\tsetup: -',
        'read\trequires: id\tsetup: create',
        'update\trequires: id, resource\tsetup: create -> read',
        'delete\trequires: id\tsetup: create',
        'search-type\trequires: id\tsetup: create',
    ]


def test_schema(runner: CliRunner) -> None:
    """Print the JSON Schema of capability table files."""
    result = runner.invoke(cli, ['schema'])

    assert result.exit_code == 0, result.output

    schema = json.loads(result.output)
    properties = schema['$defs']['CapabilityRecord']['properties']

    scalar_or_array = [
        name
        for name, prop in properties.items()
        if any(item.get('type') == 'array' for item in prop.get('anyOf', ()))
    ]

    assert schema['title'] == 'testscript-plan capability table'
    assert sorted(scalar_or_array) == ['dynamicRequirements', 'staticRequirements']
    assert set(schema['properties']) == {'interactions', 'teardown'}
