"""stackgen schema model.

Parses the JSON schema document that describes a project and its entities.

Usage::

    from stackgen.schema import load_schema

    schema = load_schema("schema.json")
    print(schema.project_name)
    print([e.name for e in schema.entities])
"""

from stackgen.schema.loader import load_schema, parse_schema
from stackgen.schema.models import Entity, Schema

__all__ = [
    "Entity",
    "Schema",
    "load_schema",
    "parse_schema",
]
