"""Runtime settings of the plan compiler."""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from testscript_plan.models import SettingsModel
from testscript_plan.names import DEFAULT_EXPRESSION

#: Smallest identifier length that still gives enough entropy for one plan.
MIN_IDENTIFIER_LENGTH = 4


class CompilerSettings(SettingsModel):
    """Settings resolved from `TESTSCRIPT_PLAN_*` environment variables.

    Values passed explicitly take precedence over the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix='TESTSCRIPT_PLAN_',
        frozen=True,
        extra='ignore',
    )

    default_expression: str = Field(
        default=DEFAULT_EXPRESSION,
        min_length=1,
        title='Default binding expression',
        description=(
            'Expression used by a variable binding when neither a test '
            'parameter nor the capability record provides one.'
        ),
    )

    identifier_length: int = Field(
        default=16,
        ge=MIN_IDENTIFIER_LENGTH,
        title='Identifier length',
        description='Number of characters in allocated response ids and variable names.',
    )

    strict: bool = Field(
        default=False,
        title='Strict mode',
        description=(
            'Raise on capability table issues that would otherwise only '
            'be reported as warnings.'
        ),
    )
