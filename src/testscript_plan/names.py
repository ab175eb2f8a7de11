"""Names and placeholder templates used in compiled plans.

This module defines the naming rules for interactions and the textual
placeholders that a compiled plan refers to. Placeholders are opaque to
the compiler: an external renderer substitutes fixtures, resource types,
and variables when it produces the final test document.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for interaction names.
#: Names start with a lowercase letter and may contain letters, digits, and dashes.
_INTERACTION_PATTERN = r'[a-z][a-z0-9]*(-[a-z0-9]+)*'

#: Compiled pattern for interaction names ("read", "search-type").
INTERACTION_PATTERN = regexp(rf'^{_INTERACTION_PATTERN}$', flags=ASCII)

#: Placeholder of the n-th statically loaded fixture.
FIXTURE_TEMPLATE = '${{EXAMPLE_RESOURCE_{number}}}'

#: Placeholder of the resource type paired with the n-th fixture.
RESOURCE_TYPE_TEMPLATE = '${{RESOURCE_TYPE_{number}}}'

#: Path segment referencing a bound variable.
PATH_VARIABLE_TEMPLATE = '/${{{name}}}'

#: Query value referencing a bound variable.
QUERY_VARIABLE_TEMPLATE = '=${{{name}}}'

#: Fallback expression extracting the id of the first resource type.
DEFAULT_EXPRESSION = '${RESOURCE_TYPE_1}.id'


Interaction = Annotated[
    str, Field(
        pattern=rf'^{_INTERACTION_PATTERN}$',
        title='Interaction name',
        description=(
            'Name of an operation kind against a resource-oriented API, '
            'for example `read` or `search-type`. '
            'Names are lowercase ASCII words joined by dashes.'
        ),
        examples=[
            'create',
            'search-type',
        ],
    ),
]


def fixture_placeholder(number: int) -> str:
    """Build the placeholder of a statically loaded fixture.

    Args:
        number: 1-based fixture number.

    Returns:
        Placeholder such as `${EXAMPLE_RESOURCE_1}`.
    """
    return FIXTURE_TEMPLATE.format(number=number)


def resource_type_placeholder(number: int) -> str:
    """Build the placeholder of the resource type paired with a fixture.

    Args:
        number: Fixture number the resource type belongs to.

    Returns:
        Placeholder such as `${RESOURCE_TYPE_1}`.
    """
    return RESOURCE_TYPE_TEMPLATE.format(number=number)
