"""Compiler of conformance test plans for resource-oriented HTTP APIs.

The `testscript_plan` package turns the name of a single CRUD or search
interaction into a multi-phase plan: the setup operations that create
the ids and resources it needs, the operation under test, and the
teardown operations that clean up after it.

Key features:
- capability tables, built in or loaded from YAML, describing what every
  interaction can do and what it requires;
- depth-first setup resolution with cycle detection;
- threading of fixtures, response ids, and variables between phases;
- deduplicated teardown.

Rendering the plan into a test document is left to external renderers.
"""

from .capabilities import CapabilityRecord, CapabilityTable, Requirement
from .compiler import PlanCompiler
from .errors import (
    CapabilityTableError,
    CapabilityWarning,
    CyclicRequirement,
    PlanError,
    UnknownInteraction,
    UnsatisfiableRequirement,
)
from .identifiers import IdentifierAllocator
from .plan import Operation, Plan, QueryParameter, VariableBinding
from .settings import CompilerSettings

__all__ = (
    'CapabilityRecord',
    'CapabilityTable',
    'CapabilityTableError',
    'CapabilityWarning',
    'CompilerSettings',
    'CyclicRequirement',
    'IdentifierAllocator',
    'Operation',
    'Plan',
    'PlanCompiler',
    'PlanError',
    'QueryParameter',
    'Requirement',
    'UnknownInteraction',
    'UnsatisfiableRequirement',
    'VariableBinding',
)
