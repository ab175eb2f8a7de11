"""Setup resolution over the capability table dependency graph.

Resolution is depth-first: the prerequisites of a prerequisite are placed
before it, so the resulting setup chain is topologically ordered. The
recursion carries the stack of interactions being resolved and fails on
the first cycle instead of exhausting the call stack.
"""

import logging
from typing import TYPE_CHECKING

from testscript_plan.errors import CyclicRequirement, UnsatisfiableRequirement

if TYPE_CHECKING:
    from testscript_plan.capabilities import CapabilityTable

logger = logging.getLogger(__name__)


class SetupResolverMixin:
    """Mixin computing the setup chain an interaction depends on.

    Implementers provide the capability table as `table`.
    """

    table: 'CapabilityTable'

    def setup_required(self, interaction: str) -> bool:
        """Check whether an interaction needs any live prerequisite.

        Raises:
            UnknownInteraction: If the interaction is not defined.
        """
        return bool(self.table.lookup(interaction).dynamic_requirements)

    def determine_setup_methods(self, interaction: str,
                                stack: tuple[str, ...] = ()) -> list[str]:
        """Resolve the ordered, duplicate-free setup chain of an interaction.

        For each dynamic requirement, in declaration order, the satisfying
        interaction is resolved, its own prerequisites are placed first,
        and then the interaction itself is appended.

        Args:
            interaction: Interaction whose prerequisites are resolved.
            stack: Interactions currently being resolved, outermost first.

        Returns:
            Setup interaction names, prerequisites before dependents.

        Raises:
            UnknownInteraction: If an interaction is not defined.
            UnsatisfiableRequirement: If no interaction satisfies a requirement.
            CyclicRequirement: If the requirements form a cycle.
        """
        record = self.table.lookup(interaction)
        stack = (*stack, interaction)

        methods: list[str] = []
        for requirement in record.dynamic_requirements:
            try:
                source = self.table.resolve_requirement(requirement)
            except UnsatisfiableRequirement:
                raise UnsatisfiableRequirement(requirement, interaction=interaction) from None

            if source in stack:
                raise CyclicRequirement((*stack[stack.index(source):], source))

            for method in (*self.determine_setup_methods(source, stack), source):
                if method not in methods:
                    methods.append(method)

        logger.debug('Resolved setup of %r: %s', interaction, methods)

        return methods
