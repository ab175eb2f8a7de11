"""Capability records and tables.

Declarative, immutable models describing what each interaction against a
resource-oriented API can do and what it needs before it can run.
"""

from .records import CapabilityRecord, Requirement
from .table import CapabilityTable

__all__ = (
    'CapabilityRecord',
    'CapabilityTable',
    'Requirement',
)
