"""Plan compiler.

Turns the name of an interaction under test into a `Plan`: the setup
operations that produce the ids and resources it needs, the operation
itself, and the teardown operations that remove whatever the plan
created on the server.
"""

import logging
from typing import TYPE_CHECKING

from testscript_plan.capabilities import CapabilityTable, Requirement
from testscript_plan.identifiers import IdentifierAllocator
from testscript_plan.names import QUERY_VARIABLE_TEMPLATE
from testscript_plan.plan import Operation, VariableBinding
from testscript_plan.settings import CompilerSettings

from .builder import OperationBuilderMixin
from .context import CompilationContext
from .resolver import SetupResolverMixin

if TYPE_CHECKING:
    from collections.abc import Sequence

if TYPE_CHECKING:
    from testscript_plan.identifiers import Allocator
    from testscript_plan.plan import Plan, QueryParameter

logger = logging.getLogger(__name__)


class PlanCompiler(SetupResolverMixin, OperationBuilderMixin):
    """Compiler of single-interaction test plans.

    The compiler is configured once with a capability table, settings,
    and an identifier allocator. It keeps no state between `build`
    calls: each call works on its own `CompilationContext`.
    """

    def __init__(self, table: CapabilityTable | None = None, *,
                 settings: CompilerSettings | None = None,
                 allocator: 'Allocator | None' = None) -> None:
        """Initialize the compiler.

        Args:
            table: Capability table; the built-in table when omitted.
            settings: Compiler settings; resolved from the environment
                when omitted.
            allocator: Identifier allocator; a random one sized by the
                settings when omitted.
        """
        self.settings = settings or CompilerSettings()
        self.table = table if table is not None else CapabilityTable.builtin()
        self.allocator = allocator or IdentifierAllocator(self.settings.identifier_length)

    def build(self, test: str, *,
              setup: 'str | Sequence[str] | None' = None,
              test_params: 'QueryParameter | None' = None) -> 'Plan':
        """Compile the plan of an interaction under test.

        Args:
            test: Interaction under test.
            setup: Explicit setup interaction(s) replacing the resolved
                chain. Only used when the test needs setup at all.
            test_params: Parameter override for the operation under test.

        Returns:
            The compiled plan.

        Raises:
            UnknownInteraction: If an interaction is not defined.
            UnsatisfiableRequirement: If a requirement can not be satisfied.
            CyclicRequirement: If requirements form a cycle.
        """
        context = CompilationContext()

        if self.setup_required(test):
            if setup is None:
                methods = self.determine_setup_methods(test)
            elif isinstance(setup, str):
                methods = [setup]
            else:
                methods = list(setup)

            for method in methods:
                self.build_setup(context, method, test_params)

        self.build_test(context, test, test_params)

        plan = context.freeze()
        logger.debug(
            'Compiled plan for %r: %d setup, %d teardown, %d variables, %d fixtures',
            test,
            len(plan.setup),
            len(plan.teardown),
            len(plan.variables),
            len(plan.fixtures),
        )

        return plan

    def build_setup(self, context: CompilationContext, interaction: str,
                    test_params: 'QueryParameter | None' = None) -> None:
        """Compile one setup interaction with its binding and teardown.

        Args:
            context: Current compilation context.
            interaction: Setup interaction.
            test_params: Parameter override whose expression, if any,
                replaces the binding expression.
        """
        operation = self.build_operation(context, interaction)
        context.setup.append(operation)
        logger.debug('Setup %r: %r', interaction, operation)

        self.build_variable(context, interaction, test_params)
        self.build_teardown(context, interaction)

    def variable_required(self, interaction: str) -> bool:
        """Check whether the response of an interaction yields an id to bind."""
        return self.table.lookup(interaction).extracts_id

    def build_variable(self, context: CompilationContext, interaction: str,
                       param: 'QueryParameter | None' = None) -> None:
        """Bind a fresh variable to the id in the latest id-supplying response.

        The expression comes from the parameter override, then from the
        capability record, then from the configured default.

        Args:
            context: Current compilation context.
            interaction: Interaction whose response is bound.
            param: Optional parameter override.
        """
        if not self.variable_required(interaction):
            return

        record = self.table.lookup(interaction)
        expression = (
            (param.expression if param is not None else None)
            or record.response_expression
            or self.settings.default_expression
        )

        name = self.allocator.fresh_variable_name()
        context.bindings.append(VariableBinding(
            name=name,
            expression=expression,
            response_id=context.response_ids.get(Requirement.ID),
        ))
        context.variables[Requirement.ID] = name

    def build_test(self, context: CompilationContext, test: str,
                   test_params: 'QueryParameter | None' = None) -> None:
        """Compile the operation under test.

        With a parameter override the operation is parametrized by query,
        otherwise by the bound id. A response id is allocated only for
        state-mutating tests, so their created resource can be bound and
        torn down.

        Args:
            context: Current compilation context.
            test: Interaction under test.
            test_params: Optional parameter override.
        """
        record = self.table.lookup(test)

        if test_params is not None:
            params = f'?{test_params.code}'
            if test_params.expression:
                params += QUERY_VARIABLE_TEMPLATE.format(
                    name=context.variables.get(Requirement.ID, ''),
                )
        else:
            params = self.determine_parameters(context, test)

        response_id = None
        if record.mutates_state:
            response_id = self.determine_response_id(context, test)

        resource = self.determine_resource(context, test)
        source_id = self.determine_source_id(context, test)

        operation = Operation(
            method=self.table.normalize(test),
            resource=resource,
            source_id=source_id,
            response_id=response_id,
            params=params,
        )
        context.test.append(operation)
        logger.debug('Test %r: %r', test, operation)

        if self.teardown_required(test):
            self.build_variable(context, test)
        self.build_teardown(context, test)

    def teardown_required(self, interaction: str) -> bool:
        """Check whether an interaction leaves server state to clean up.

        The teardown interaction itself never requires a teardown.
        """
        if self.table.is_teardown(interaction):
            return False

        return self.table.lookup(interaction).mutates_state

    def determine_teardown_method(self, interaction: str) -> str | None:
        """Pick the interaction that undoes another one.

        Only interactions that send a body create or replace a resource
        which can be deleted afterwards.

        Returns:
            The teardown interaction name, or None.
        """
        if self.table.lookup(interaction).sends_body:
            return self.table.teardown

        return None

    def build_teardown(self, context: CompilationContext, interaction: str) -> None:
        """Compile the teardown of an interaction, skipping duplicates.

        Args:
            context: Current compilation context.
            interaction: Interaction whose effects are torn down.
        """
        if not self.teardown_required(interaction):
            return

        teardown = self.determine_teardown_method(interaction)
        if teardown is None:
            return

        operation = self.build_operation(context, teardown, with_response=False)
        if context.add_teardown(operation):
            logger.debug('Teardown %r after %r: %r', teardown, interaction, operation)
        else:
            logger.debug('Skipped duplicate teardown after %r', interaction)

