"""JSON Schema management for capability table files."""

from functools import cache
from json import dumps
from typing import TYPE_CHECKING

from pydantic.json_schema import GenerateJsonSchema, JsonSchemaValue

from testscript_plan.capabilities import CapabilityTable

if TYPE_CHECKING:
    from pydantic_core import core_schema as core


class SchemaGenerator(GenerateJsonSchema):
    """Custom JSON Schema generator for capability table files.

    Requirement lists accept a single scalar requirement as shorthand
    for a one-element list, so array schemas of requirements also allow
    their item schema on its own.
    """

    @classmethod
    @cache
    def make_schema(cls, indent: int | str | None = 4) -> str:
        """Generate the JSON Schema for capability table files.

        Args:
            indent: Indentation level used for JSON formatting.

        Returns:
            Serialized JSON Schema string.
        """
        schema = {
            **CapabilityTable.model_json_schema(
                schema_generator=cls,
                mode='validation',
            ),
            'title': 'testscript-plan capability table',
            'description': 'JSON Schema for testscript-plan capability table files',
            '$schema': cls.schema_dialect,
        }

        return dumps(
            schema,
            ensure_ascii=False,
            sort_keys=True,
            indent=indent,
        )

    @staticmethod
    def _allow_scalar(json_schema: JsonSchemaValue) -> JsonSchemaValue:
        """Allow an array schema to be satisfied by a single item.

        Args:
            json_schema: Array JSON schema.

        Returns:
            A schema accepting either one item or the array.
        """
        if json_schema.get('type') != 'array' or 'items' not in json_schema:
            return json_schema

        return {'anyOf': [json_schema['items'], json_schema]}

    def frozenset_schema(self, schema: 'core.FrozenSetSchema') -> JsonSchemaValue:
        """Generate JSON Schema for static requirement sets.

        Args:
            schema: Pydantic core schema describing a frozen set.

        Returns:
            A schema accepting a single requirement or a unique array.
        """
        return self._allow_scalar(super().frozenset_schema(schema))

    def tuple_schema(self, schema: 'core.TupleSchema') -> JsonSchemaValue:
        """Generate JSON Schema for ordered dynamic requirements.

        Args:
            schema: Pydantic core schema describing a tuple.

        Returns:
            A schema accepting a single requirement or an array.
        """
        return self._allow_scalar(super().tuple_schema(schema))
