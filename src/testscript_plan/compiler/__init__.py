"""Plan compiler core.

The compiler is assembled from two mixins, one resolving the setup chain
over the capability table and one deriving operation fields, plus the
`PlanCompiler` class that drives setup, test, and teardown compilation
over a per-build `CompilationContext`.
"""

from .compiler import PlanCompiler
from .context import CompilationContext

__all__ = (
    'CompilationContext',
    'PlanCompiler',
)
