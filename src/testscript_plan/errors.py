"""Core exception hierarchy.

This module defines the error and warning types raised while loading
capability tables and compiling plans. Every error can carry a context
describing where it happened (a source file position, an interaction)
and the element that caused it, which the formatter renders as a short
YAML snippet.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4

CHAIN_SEPARATOR = ' -> '


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file.
    line_num: int | None
    #: Column number in the source file.
    column_num: int | None

    #: Interaction being processed when the error occurred.
    interaction: str | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Raw element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting plan-related errors.

    Produces human-readable messages with an optional location line
    and a YAML snippet of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        location = cls.get_location_string(context, indent=FORMAT_INDENT)
        snippet = cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        if location or snippet:
            message += linesep
        message += location
        message += snippet

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and interaction location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string, or an empty string when the
            context carries neither a source position nor an interaction.
        """
        indent = cls._ensure_indent(indent)
        message = ''

        filename = context.get('filename')
        line_num = context.get('line_num')
        if filename or line_num is not None:
            message += f'{indent}in "{filename or FORMAT_FILENAME}"'
            if line_num is not None:
                message += f', line {line_num + 1}'
                if (column_num := context.get('column_num')) is not None:
                    message += f', column {column_num + 1}'
            message += linesep

        if interaction := context.get('interaction'):
            message += f'{indent}on interaction "{interaction}"{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = ''
            if error.problem_mark is not None:
                snippet = error.problem_mark.get_snippet(indent=0) or ''
            return cls._make_indent(snippet, indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_indent(
                dump(element, indent=SNIPPET_INDENT, sort_keys=False),
                indent,
            )
            return snippet + linesep

        return ''

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string.

        Empty or whitespace-only lines are omitted.

        Args:
            value: Original multi-line string.
            indent: Indentation prefix.

        Returns:
            Indented string.
        """
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input.

        Args:
            indent: Indentation as string or number of spaces.

        Returns:
            A string consisting of spaces or the provided string.
        """
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class CapabilityWarning(UserWarning):
    """Warning emitted for non-fatal capability table issues.

    Used in relaxed mode when a table is usable but some interaction
    can never be compiled, for example because no interaction in the
    table satisfies one of its requirements.
    """


class PlanError(Exception, ErrorFormatter):
    """Base exception for all testscript-plan errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Optional error context.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)


class UnknownInteraction(PlanError, LookupError):
    """Error raised when an interaction is not defined in the capability table."""

    def __init__(self, interaction: str) -> None:
        """Initialize an unknown interaction error.

        Args:
            interaction: The name that failed to resolve.
        """
        self.interaction = interaction

        super().__init__(f'Unknown interaction {interaction!r}')


class UnsatisfiableRequirement(PlanError):
    """Error raised when no interaction in the table satisfies a requirement."""

    def __init__(self, requirement: str, *,
                 interaction: str | None = None) -> None:
        """Initialize an unsatisfiable requirement error.

        Args:
            requirement: Requirement kind that can not be satisfied.
            interaction: Interaction that declared the requirement, if known.
        """
        self.requirement = requirement

        super().__init__(
            f'No interaction can satisfy requirement {str(requirement)!r}',
            context=ErrorContext(interaction=interaction),
        )


class CyclicRequirement(PlanError):
    """Error raised when setup resolution meets a dependency cycle.

    The `chain` attribute lists interactions from the first one on the
    cycle back to itself, for example `('read', 'create', 'read')`.
    """

    def __init__(self, chain: 'Sequence[str]') -> None:
        """Initialize a cyclic requirement error.

        Args:
            chain: Interactions forming the cycle, closed by its first element.
        """
        self.chain = tuple(chain)

        super().__init__(
            f'Cyclic requirement {CHAIN_SEPARATOR.join(self.chain)}',
            context=ErrorContext(interaction=self.chain[0] if self.chain else None),
        )


class CapabilityTableError(PlanError):
    """Error raised when a capability table can not be loaded.

    Covers YAML syntax errors, schema violations, and, in strict mode,
    semantic issues such as unsatisfiable requirements.
    """

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create a table error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            CapabilityTableError carrying the parser position.
        """
        error_context = ErrorContext(error=error)
        if (mark := error.problem_mark) is not None:
            error_context.update(
                filename=mark.name,
                line_num=mark.line,
                column_num=mark.column,
            )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{" " * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None) -> 'Self':
        """Create a table error from a Pydantic validation failure.

        The first validation issue that can be located in `data` decides
        the message and the snippet; the interaction name is taken from
        the error location when the issue sits inside one record.

        Args:
            error: ValidationError raised by Pydantic.
            data: Raw table data that failed validation.
            filename: Name of the source file, if any.

        Returns:
            CapabilityTableError describing the validation failure.
        """
        error_context = ErrorContext(filename=filename, error=error)

        if not data or not isinstance(data, dict):
            return cls('Capability table must be a mapping', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_pydantic_context(data, item):
                message, value = located
                interaction = None
                if len(item['loc']) > 1 and item['loc'][0] == 'interactions':
                    interaction = str(item['loc'][1])
                return cls(message, context=ErrorContext(
                    **error_context,
                    interaction=interaction,
                    element=value,
                ))

        return cls('Validation error', context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in validated data.

        Walks the Pydantic error location path as far as it exists in the
        raw data and extracts the minimal fragment responsible for the
        failure, used later to build a focused YAML snippet.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if a relevant
            context can be located, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, (list, tuple)):
                if isinstance(key, int) and 0 <= key < len(last_item):
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            elif isinstance(last_item, dict):
                if key in last_item:
                    container = last_item
                    last_item = last_item[key]
                    last_key = key
            else:
                break

        message = None
        for item in (error.get('msg') or '').splitlines():
            if item_message := item.strip():
                message = item_message
                break

        if not message:
            return None

        if last_key is None:
            return message, None
        if isinstance(container, (list, tuple)):
            return message, [last_item]
        if isinstance(container, dict):
            return message, {last_key: last_item}

        return None  # pragma: no cover
