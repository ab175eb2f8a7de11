"""Capability table: interaction name to capability record lookup.

The table is an explicitly constructed, immutable configuration object.
Besides plain lookup it answers the two derived questions the compiler
asks when it resolves abstract requirements into concrete interactions:
which interaction yields an id, and which one retrieves a resource.

Tables are either built in (`CapabilityTable.builtin`) or loaded from a
YAML document (`CapabilityTable.from_yaml`).
"""

import logging
from functools import cached_property
from typing import TYPE_CHECKING, Any, Self, assert_never
from warnings import warn

from pydantic import Field, ValidationError, model_validator
from yaml import safe_load
from yaml.error import MarkedYAMLError

from testscript_plan.errors import (
    CapabilityTableError,
    CapabilityWarning,
    UnknownInteraction,
    UnsatisfiableRequirement,
)
from testscript_plan.models import SchemaModel
from testscript_plan.names import Interaction  # noqa: TC001

from .records import CapabilityRecord, Requirement

if TYPE_CHECKING:
    from io import TextIOBase

logger = logging.getLogger(__name__)

#: Interaction used to clean up resources created by a plan.
DEFAULT_TEARDOWN = 'delete'


class CapabilityTable(SchemaModel):
    """Immutable mapping from interaction names to capability records.

    Definition order matters: when several interactions can satisfy a
    requirement, the first one defined wins.
    """

    interactions: dict[Interaction, CapabilityRecord] = Field(
        min_length=1,
        title='Interactions',
        description='Capability records keyed by interaction name, in priority order.',
    )

    teardown: Interaction = Field(
        default=DEFAULT_TEARDOWN,
        title='Teardown interaction',
        description=(
            'Interaction that removes a resource created during a plan. '
            'It is never torn down itself.'
        ),
    )

    @model_validator(mode='after')
    def check_teardown_defined(self) -> Self:
        """Check that the teardown interaction is part of the table.

        Returns:
            Self.

        Raises:
            ValueError: If the teardown interaction is not defined.
        """
        if self.teardown in self.interactions:
            return self

        raise ValueError(f'Teardown interaction {self.teardown!r} is not defined')

    def __contains__(self, name: object) -> bool:
        """Check whether an interaction is defined."""
        return name in self.interactions

    def __len__(self) -> int:
        """Number of defined interactions."""
        return len(self.interactions)

    def lookup(self, name: str) -> CapabilityRecord:
        """Get the capability record of an interaction.

        Args:
            name: Interaction name.

        Returns:
            The capability record.

        Raises:
            UnknownInteraction: If the interaction is not defined.
        """
        try:
            return self.interactions[name]
        except KeyError:
            raise UnknownInteraction(name) from None

    def normalize(self, name: str) -> str:
        """Get the method name an interaction is rendered with.

        Args:
            name: Interaction name.

        Returns:
            The record's rendered method, or the name itself.

        Raises:
            UnknownInteraction: If the interaction is not defined.
        """
        return self.lookup(name).method or name

    def is_teardown(self, name: str) -> bool:
        """Check whether an interaction is the teardown interaction."""
        return name == self.teardown

    @cached_property
    def id_source(self) -> str | None:
        """First interaction, in definition order, whose response yields an id."""
        return next((
            name
            for name, record in self.interactions.items()
            if record.extracts_id
        ), None)

    @cached_property
    def resource_source(self) -> str | None:
        """First interaction, in definition order, whose response holds a resource."""
        return next((
            name
            for name, record in self.interactions.items()
            if record.retrieves_resource
        ), None)

    def interaction_that_extracts_id(self) -> str:
        """Get the interaction used to obtain an id.

        Returns:
            Interaction name.

        Raises:
            UnsatisfiableRequirement: If no interaction extracts an id.
        """
        if self.id_source is None:
            raise UnsatisfiableRequirement(Requirement.ID)

        return self.id_source

    def interaction_that_retrieves_resource(self) -> str:
        """Get the interaction used to obtain a resource.

        Returns:
            Interaction name.

        Raises:
            UnsatisfiableRequirement: If no interaction retrieves a resource.
        """
        if self.resource_source is None:
            raise UnsatisfiableRequirement(Requirement.RESOURCE)

        return self.resource_source

    def resolve_requirement(self, requirement: Requirement) -> str:
        """Resolve an abstract requirement kind into a concrete interaction.

        Args:
            requirement: Requirement kind.

        Returns:
            Name of the interaction that satisfies the requirement.

        Raises:
            UnsatisfiableRequirement: If no interaction satisfies it.
        """
        match requirement:
            case Requirement.ID:
                return self.interaction_that_extracts_id()
            case Requirement.RESOURCE:
                return self.interaction_that_retrieves_resource()
            case _:  # pragma: no cover
                assert_never(requirement)

    def check(self, strict: bool = False) -> None:
        """Check that every declared requirement can be satisfied.

        In relaxed mode issues are emitted as `CapabilityWarning` and the
        table stays usable for interactions that are not affected.

        Args:
            strict: Raise instead of warning.

        Raises:
            CapabilityTableError: On the first issue, in strict mode.
        """
        sources = {
            Requirement.ID: self.id_source,
            Requirement.RESOURCE: self.resource_source,
        }

        for name, record in self.interactions.items():
            for requirement in record.dynamic_requirements:
                if sources[requirement] is not None:
                    continue
                message = (
                    f'Interaction {name!r} requires {requirement.value!r}, '
                    'but no interaction can satisfy it'
                )
                if strict:
                    raise CapabilityTableError(message)
                warn(message, category=CapabilityWarning, stacklevel=2)

    @classmethod
    def from_mapping(cls, data: Any, *,  # noqa: ANN401
                     strict: bool = False,
                     filename: str | None = None) -> Self:
        """Validate a raw mapping into a capability table.

        Args:
            data: Raw table data, usually loaded from YAML.
            strict: Raise on semantic issues instead of warning.
            filename: Name of the source file, used in error messages.

        Returns:
            A validated capability table.

        Raises:
            CapabilityTableError: If the data does not describe a valid table.
        """
        try:
            table = cls.model_validate(data)
        except ValidationError as base:
            raise CapabilityTableError.from_pydantic_error(
                base,
                data=data,
                filename=filename,
            ) from base

        table.check(strict)

        logger.info(
            'Loaded capability table with %d interactions from %s',
            len(table),
            filename or 'mapping',
        )

        return table

    @classmethod
    def from_yaml(cls, stream: 'TextIOBase | str', *,
                  strict: bool = False) -> Self:
        """Load a capability table from a YAML document.

        Args:
            stream: Open text stream or YAML string.
            strict: Raise on semantic issues instead of warning.

        Returns:
            A validated capability table.

        Raises:
            CapabilityTableError: If the document is not valid YAML or
                does not describe a valid table.
        """
        try:
            data = safe_load(stream)
        except MarkedYAMLError as base:
            raise CapabilityTableError.from_yaml_error(base) from base

        return cls.from_mapping(
            data,
            strict=strict,
            filename=getattr(stream, 'name', None),
        )

    @classmethod
    def builtin(cls) -> Self:
        """Build a table with the built-in CRUD and search interactions.

        Returns:
            A fresh capability table.
        """
        from testscript_plan.builtins import interactions  # noqa: PLC0415

        return cls(
            interactions=dict(interactions.BUILTIN_INTERACTIONS),
            teardown=interactions.BUILTIN_TEARDOWN,
        )
