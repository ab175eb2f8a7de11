"""Built-in capability records for CRUD and search interactions.

Definition order is significant: `create` is the first interaction that
extracts an id and `read` the first that retrieves a resource, so those
are the interactions setup resolution picks for the `id` and `resource`
requirements.
"""

from testscript_plan.capabilities.records import CapabilityRecord, Requirement
from testscript_plan.names import DEFAULT_EXPRESSION

create = CapabilityRecord(
    sends_body=True,
    extracts_id=True,
    mutates_state=True,
    static_requirements=frozenset({Requirement.RESOURCE}),
    response_expression=DEFAULT_EXPRESSION,
)

read = CapabilityRecord(
    fetches_resource=True,
    retrieves_resource=True,
    dynamic_requirements=(Requirement.ID,),
)

update = CapabilityRecord(
    sends_body=True,
    mutates_state=True,
    dynamic_requirements=(Requirement.ID, Requirement.RESOURCE),
)

delete = CapabilityRecord(
    mutates_state=True,
    dynamic_requirements=(Requirement.ID,),
)

# Rendered as a plain `search`; the id comes from the first bundle entry.
search_type = CapabilityRecord(
    fetches_resource=True,
    extracts_id=True,
    retrieves_resource=True,
    dynamic_requirements=(Requirement.ID,),
    response_expression='Bundle.entry.resource.id',
    method='search',
)

BUILTIN_INTERACTIONS: tuple[tuple[str, CapabilityRecord], ...] = (
    ('create', create),
    ('read', read),
    ('update', update),
    ('delete', delete),
    ('search-type', search_type),
)

BUILTIN_TEARDOWN = 'delete'
