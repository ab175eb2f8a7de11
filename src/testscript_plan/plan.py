"""Compiled plan data structures.

A plan is the output of the compiler: ordered setup operations, exactly
one operation under test, deduplicated teardown operations, and the
variable and fixture bookkeeping an external renderer needs to turn the
plan into a test document. All structures are immutable values.
"""

from typing import TYPE_CHECKING

from pydantic import Field

from testscript_plan.models import SchemaModel

if TYPE_CHECKING:
    from collections.abc import Iterator


class Operation(SchemaModel):
    """A single executable step of a plan.

    Two operations are equal iff all five fields match; teardown
    deduplication relies on this.
    """

    method: str = Field(
        title='Method',
        description='Rendered interaction name, for example `search` for `search-type`.',
    )

    source_id: str | None = Field(
        default=None,
        title='Source id',
        description='Fixture placeholder or response id providing the request body.',
    )

    resource: str | None = Field(
        default=None,
        title='Resource type',
        description='Placeholder naming the resource type involved.',
    )

    params: str | None = Field(
        default=None,
        title='Parameters',
        description='Path or query parameter string.',
    )

    response_id: str | None = Field(
        default=None,
        title='Response id',
        description='Identifier the response is stored under for later reference.',
    )


class VariableBinding(SchemaModel):
    """A named placeholder extracted from a stored response.

    Unpacks as a `(name, expression, response_id)` triple.
    """

    name: str
    expression: str
    response_id: str | None = None

    def __iter__(self) -> 'Iterator[str | None]':  # type: ignore[override]
        """Iterate over the binding as a triple."""
        yield self.name
        yield self.expression
        yield self.response_id


class QueryParameter(SchemaModel):
    """Test-specific parameter override for the operation under test.

    The operation under test is parametrized as `?<code>`; when an
    expression is given, the value is bound from the id variable as
    `?<code>=${<variable>}` and the setup bindings extract it with
    this expression.
    """

    code: str = Field(
        min_length=1,
        title='Query code',
        description='Query parameter code, for example `_id` or `identifier`.',
    )

    expression: str | None = Field(
        default=None,
        title='Binding expression',
        description='Expression extracting the parameter value from a response.',
    )


class Plan(SchemaModel):
    """Compiled setup, test, and teardown phases of a single interaction."""

    setup: tuple[Operation, ...] = ()

    test: tuple[Operation, ...] = Field(
        min_length=1,
        max_length=1,
        description='The operation under test, kept as a sequence like the other phases.',
    )

    teardown: tuple[Operation, ...] = ()

    variables: tuple[VariableBinding, ...] = ()

    fixtures: tuple[str, ...] = ()

    @property
    def operation(self) -> Operation:
        """The operation under test."""
        return self.test[0]
