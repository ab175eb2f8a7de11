"""Per-build compilation state.

Every `PlanCompiler.build` call creates one `CompilationContext` and
threads it through all helpers, so the compiler itself holds no mutable
state and a fresh build always starts from empty bookkeeping.
"""

from dataclasses import dataclass, field

from testscript_plan.capabilities import Requirement  # noqa: TC001
from testscript_plan.names import fixture_placeholder
from testscript_plan.plan import Operation, Plan, VariableBinding


@dataclass
class CompilationContext:
    """Mutable bookkeeping of a plan under construction.

    Attributes:
        variables: Variable name currently bound per requirement kind.
        response_ids: Response id currently supplying each requirement kind.
        static_fixture_counter: Number of fixtures allocated so far.
        setup: Setup operations in execution order.
        test: The operation under test, once compiled.
        teardown: Deduplicated teardown operations.
        bindings: Variable bindings in allocation order.
        fixtures: Fixture placeholders in allocation order.
    """

    variables: dict[Requirement, str] = field(default_factory=dict)
    response_ids: dict[Requirement, str] = field(default_factory=dict)
    static_fixture_counter: int = 0

    setup: list[Operation] = field(default_factory=list)
    test: list[Operation] = field(default_factory=list)
    teardown: list[Operation] = field(default_factory=list)
    bindings: list[VariableBinding] = field(default_factory=list)
    fixtures: list[str] = field(default_factory=list)

    def allocate_fixture(self) -> str:
        """Allocate the next fixture placeholder.

        Returns:
            The new placeholder, numbered from 1.
        """
        self.static_fixture_counter += 1
        self.fixtures.append(fixture_placeholder(self.static_fixture_counter))

        return self.fixtures[-1]

    def add_teardown(self, operation: Operation) -> bool:
        """Append a teardown operation unless an equal one is present.

        Args:
            operation: Candidate teardown operation.

        Returns:
            Whether the operation was appended.
        """
        if operation in self.teardown:
            return False

        self.teardown.append(operation)

        return True

    def freeze(self) -> Plan:
        """Produce the immutable plan from the collected state."""
        return Plan(
            setup=tuple(self.setup),
            test=tuple(self.test),
            teardown=tuple(self.teardown),
            variables=tuple(self.bindings),
            fixtures=tuple(self.fixtures),
        )
