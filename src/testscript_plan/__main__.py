"""Command-line utilities for testscript-plan.

The CLI inspects capability tables and prints compiled plans as YAML or
JSON. The printed plan is a debugging aid, not a test document.
"""

import logging
from json import dumps
from typing import TYPE_CHECKING

from click import (
    BadParameter,
    Choice,
    ClickException,
    File,
    argument,
    echo,
    group,
    option,
    pass_context,
)
from yaml import safe_dump

from testscript_plan.capabilities import CapabilityTable
from testscript_plan.compiler import PlanCompiler
from testscript_plan.errors import PlanError
from testscript_plan.jsonschema import SchemaGenerator
from testscript_plan.names import INTERACTION_PATTERN
from testscript_plan.plan import QueryParameter
from testscript_plan.settings import CompilerSettings

if TYPE_CHECKING:
    from io import TextIOBase

if TYPE_CHECKING:
    from click import Context, Parameter

LOG_FORMAT = '%(levelname)s %(name)s: %(message)s'

TableFile = File('rt', encoding='utf-8')


def _load_table(table: 'TextIOBase | None', settings: CompilerSettings) -> CapabilityTable:
    """Load a capability table or fall back to the built-in one.

    Args:
        table: Open table file, if given.
        settings: Compiler settings deciding strictness.

    Returns:
        The capability table.

    Raises:
        ClickException: If the table can not be loaded.
    """
    if table is None:
        return CapabilityTable.builtin()

    try:
        return CapabilityTable.from_yaml(table, strict=settings.strict)
    except PlanError as error:
        raise ClickException(str(error)) from error


def _check_names(ctx: 'Context', param: 'Parameter',  # noqa: ARG001
                 value: 'str | tuple[str, ...]') -> 'str | tuple[str, ...]':
    """Validate interaction names given on the command line.

    Raises:
        BadParameter: If a name is not a valid interaction name.
    """
    for name in (value,) if isinstance(value, str) else value:
        if not INTERACTION_PATTERN.match(name):
            raise BadParameter(f'{name!r} is not a valid interaction name')

    return value


@group(help='Command-line utilities for testscript-plan.')
@option('-v', '--verbose', is_flag=True, help='Enable debug logging.')
@option('--strict', is_flag=True, help='Fail on capability table issues.')
@pass_context
def cli(ctx: 'Context', verbose: bool, strict: bool) -> None:
    """Root CLI group for testscript-plan tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    overrides = {'strict': True} if strict else {}
    ctx.obj = CompilerSettings(**overrides)


@cli.command(
    name='schema',
    help='Print the JSON Schema of capability table files to standard output.',
)
def print_schema() -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema())


@cli.command(
    name='interactions',
    help='List interactions of a capability table with their requirements.',
)
@option('-t', '--table', type=TableFile, help='Capability table YAML file.')
@pass_context
def list_interactions(ctx: 'Context', table: 'TextIOBase | None') -> None:
    """Print every interaction with its setup chain."""
    compiler = PlanCompiler(_load_table(table, ctx.obj), settings=ctx.obj)

    for name, record in compiler.table.interactions.items():
        requirements = ', '.join(record.dynamic_requirements) or '-'
        try:
            chain = ' -> '.join(compiler.determine_setup_methods(name)) or '-'
        except PlanError as error:
            chain = f'error: {error.message}'
        echo(f'{name}\trequires: {requirements}\tsetup: {chain}')


@cli.command(
    name='compile',
    help='Compile the plan of an interaction under test and print it.',
)
@argument('test', callback=_check_names)
@option('-t', '--table', type=TableFile, help='Capability table YAML file.')
@option(
    '-s', '--setup',
    multiple=True,
    callback=_check_names,
    help='Explicit setup interaction, repeatable.',
)
@option('--param-code', help='Query parameter code of the operation under test.')
@option('--param-expression', help='Expression binding the query parameter value.')
@option(
    '-f', '--format', 'output_format',
    type=Choice(['yaml', 'json']),
    default='yaml',
    show_default=True,
    help='Output format.',
)
@pass_context
def compile_plan(ctx: 'Context', test: str,  # noqa: PLR0913
                 table: 'TextIOBase | None',
                 setup: tuple[str, ...],
                 param_code: str | None,
                 param_expression: str | None,
                 output_format: str) -> None:
    """Compile and print a plan."""
    if param_expression and not param_code:
        raise ClickException('--param-expression requires --param-code')

    test_params = None
    if param_code:
        test_params = QueryParameter(code=param_code, expression=param_expression)

    compiler = PlanCompiler(_load_table(table, ctx.obj), settings=ctx.obj)

    try:
        plan = compiler.build(test, setup=setup or None, test_params=test_params)
    except PlanError as error:
        raise ClickException(str(error)) from error

    content = plan.model_dump(mode='json', exclude_none=True)
    if output_format == 'json':
        echo(dumps(content, ensure_ascii=False, indent=4))
    else:
        echo(safe_dump(content, sort_keys=False), nl=False)


if __name__ == '__main__':
    cli()
