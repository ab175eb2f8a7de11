"""Operation field helpers shared by setup, test, and teardown compilation.

Every helper reads the capability record of an interaction and the
current compilation context; some of them also advance the context
(allocating fixtures or response ids). The order in which they are
called therefore matters and is fixed by the compiler.
"""

from typing import TYPE_CHECKING

from testscript_plan.capabilities import Requirement
from testscript_plan.names import PATH_VARIABLE_TEMPLATE, resource_type_placeholder
from testscript_plan.plan import Operation

if TYPE_CHECKING:
    from testscript_plan.capabilities import CapabilityTable
    from testscript_plan.identifiers import Allocator

    from .context import CompilationContext


class OperationBuilderMixin:
    """Mixin deriving operation fields from capability records.

    Implementers provide the capability table as `table` and an
    identifier allocator as `allocator`.
    """

    table: 'CapabilityTable'
    allocator: 'Allocator'

    def determine_parameters(self, context: 'CompilationContext',
                             interaction: str) -> str | None:
        """Reference the bound id variable as a path segment.

        Returns:
            `/${<variable>}` if the interaction requires an id, else None.
        """
        if not self.table.lookup(interaction).requires(Requirement.ID):
            return None

        return PATH_VARIABLE_TEMPLATE.format(name=context.variables.get(Requirement.ID, ''))

    def determine_source_id(self, context: 'CompilationContext',
                            interaction: str) -> str | None:
        """Pick the body source of an operation.

        A static resource requirement allocates a new fixture; a dynamic
        one reuses the response that last supplied a resource.

        Returns:
            Fixture placeholder, response id, or None.
        """
        record = self.table.lookup(interaction)

        if record.loads(Requirement.RESOURCE):
            return context.allocate_fixture()

        if record.requires(Requirement.RESOURCE):
            return context.response_ids.get(Requirement.RESOURCE)

        return None

    def determine_resource(self, context: 'CompilationContext',
                           interaction: str) -> str | None:
        """Name the resource type an id-requiring operation refers to.

        The placeholder follows the most recently allocated fixture rather
        than the interaction that produced the id. This holds for plans
        built around a single resource type only.

        Returns:
            `${RESOURCE_TYPE_<n>}` if the interaction requires an id, else None.
        """
        if not self.table.lookup(interaction).requires(Requirement.ID):
            return None

        return resource_type_placeholder(context.static_fixture_counter)

    def determine_response_id(self, context: 'CompilationContext',
                              interaction: str) -> str | None:
        """Allocate a response id for operations whose response is reused.

        The new id becomes the supplier of the `id` requirement, the
        `resource` requirement, or both.

        Returns:
            The allocated response id, or None.
        """
        record = self.table.lookup(interaction)
        if not record.extracts_id and not record.retrieves_resource:
            return None

        response_id = self.allocator.fresh_response_id()
        if record.extracts_id:
            context.response_ids[Requirement.ID] = response_id
        if record.retrieves_resource:
            context.response_ids[Requirement.RESOURCE] = response_id

        return response_id

    def build_operation(self, context: 'CompilationContext', interaction: str, *,
                        with_response: bool = True) -> Operation:
        """Build a setup-style operation.

        Fields are derived in a fixed order: parameters, source id,
        resource, and finally the response id.

        Args:
            context: Current compilation context.
            interaction: Interaction to build the operation for.
            with_response: Whether to allocate a response id.

        Returns:
            The new operation.
        """
        params = self.determine_parameters(context, interaction)
        source_id = self.determine_source_id(context, interaction)
        resource = self.determine_resource(context, interaction)

        response_id = None
        if with_response:
            response_id = self.determine_response_id(context, interaction)

        return Operation(
            method=self.table.normalize(interaction),
            params=params,
            source_id=source_id,
            resource=resource,
            response_id=response_id,
        )
