"""Capability records describing what each interaction can do.

A capability record is pure data: whether an interaction sends a body,
fetches or retrieves a resource, yields an id, mutates server state,
and which inputs it needs before it can run. The plan compiler reads
these records to decide which auxiliary operations a test requires.
"""

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from testscript_plan.models import SchemaModel


class Requirement(StrEnum):
    """Kind of input an interaction needs before it can run."""

    #: The id of an existing resource on the server.
    ID = 'id'
    #: A concrete resource representation.
    RESOURCE = 'resource'


class CapabilityRecord(SchemaModel):
    """Capabilities and requirements of a single interaction.

    Field aliases accept both the descriptive camel-cased keys and the
    terse keys of legacy `interactions_base.yml` files.
    """

    sends_body: bool = Field(
        default=False,
        validation_alias=AliasChoices('sendsBody', 'send'),
        title='Sends body',
        description='The operation transmits a resource representation.',
    )

    fetches_resource: bool = Field(
        default=False,
        validation_alias=AliasChoices('fetchesResource', 'fetch'),
        title='Fetches resource',
        description='The operation retrieves a resource representation.',
    )

    extracts_id: bool = Field(
        default=False,
        validation_alias=AliasChoices('extractsId', 'getId'),
        title='Extracts id',
        description='The response yields an id usable by later operations.',
    )

    mutates_state: bool = Field(
        default=False,
        validation_alias=AliasChoices('mutatesState', 'modify'),
        title='Mutates state',
        description=(
            'The operation changes server-side state and requires a teardown, '
            'unless it is the teardown interaction itself.'
        ),
    )

    retrieves_resource: bool = Field(
        default=False,
        validation_alias=AliasChoices('retrievesResource', 'getResource'),
        title='Retrieves resource',
        description=(
            'The response contains a concrete resource body, '
            'directly or via a found set.'
        ),
    )

    static_requirements: frozenset[Requirement] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices('staticRequirements', 'staticReq'),
        title='Static requirements',
        description='Inputs that must come from a statically held fixture.',
    )

    dynamic_requirements: tuple[Requirement, ...] = Field(
        default=(),
        validation_alias=AliasChoices('dynamicRequirements', 'dynamicReq'),
        title='Dynamic requirements',
        description=(
            'Inputs that must be obtained from a prior live interaction, '
            'in the order they must be satisfied.'
        ),
    )

    response_expression: str | None = Field(
        default=None,
        validation_alias=AliasChoices('responseExpression', 'expression'),
        title='Response expression',
        description='Path expression pulling an id out of the response.',
    )

    method: str | None = Field(
        default=None,
        title='Rendered method',
        description=(
            'Name the operation is rendered with. '
            'Defaults to the interaction name.'
        ),
    )

    @field_validator('static_requirements', 'dynamic_requirements', mode='before')
    @classmethod
    def wrap_single_requirement(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a single requirement written as a scalar.

        Args:
            value: Raw field value.

        Returns:
            A one-element list for string input, otherwise the value as is.
        """
        if isinstance(value, str):
            return [value]

        return value

    def requires(self, requirement: Requirement) -> bool:
        """Check whether the interaction needs a live input of a kind."""
        return requirement in self.dynamic_requirements

    def loads(self, requirement: Requirement) -> bool:
        """Check whether the interaction needs a static fixture of a kind."""
        return requirement in self.static_requirements
