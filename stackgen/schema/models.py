"""Pydantic v2 models for the stackgen input schema.

The schema document is camelCase JSON (``projectName``, ``tableName``...);
the models expose snake_case attributes and accept either spelling on input.
Both models are frozen: a schema is loaded once and never mutated.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Word characters joined by single hyphens, each followed by a letter.
_ENTITY_NAME = r"^\w+(-[A-Za-z]\w*)*$"


class Entity(BaseModel):
    """A single domain object that drives per-entity artifact generation.

    Only ``name`` and ``table_name`` are read by the engine.  Any other keys
    (fields, relations, ...) are kept verbatim and handed to the templates.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        pattern=_ENTITY_NAME,
        description="Entity name, PascalCase by convention; single hyphens allowed",
    )
    table_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("tableName", "table_name"),
        description="Storage-layer table name, used verbatim in migration filenames",
    )

    def template_dict(self) -> dict[str, Any]:
        """Return the entity as a plain dict, pass-through keys included.

        The table name appears under both ``table_name`` and the schema's
        own ``tableName`` spelling.
        """
        data = self.model_dump()
        data["tableName"] = self.table_name
        return data


class Schema(BaseModel):
    """The parsed and defaulted project schema.

    The five feature fields are tri-state: ``None`` means the schema does not
    care and the command-line default applies.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    project_name: str = Field(
        ...,
        validation_alias=AliasChoices("projectName", "project_name"),
        description="Human-readable project identifier",
    )
    database: str = Field(default="postgres", description="Production database")
    dev_database: str = Field(
        default="sqlite",
        validation_alias=AliasChoices("devDatabase", "dbDev", "dev_database"),
    )
    test_database: str = Field(
        default="sqlite",
        validation_alias=AliasChoices("testDatabase", "dbTest", "test_database"),
    )
    auth_entity: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("authEntity", "auth_entity"),
        description="Entity used for authentication; generic auth when unset",
    )
    entities: list[Entity] = Field(default_factory=list)

    graphql: Optional[bool] = None
    docker: Optional[bool] = None
    ci: Optional[bool] = None
    terraform: Optional[bool] = None
    admin_panel: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("adminPanel", "admin_panel"),
    )

    def template_fields(self) -> dict[str, Any]:
        """Return the schema's top-level fields for a template context.

        Entities are converted to plain dicts so templates see pass-through
        keys the same way for every entity.
        """
        data = self.model_dump(exclude={"entities"})
        data["entities"] = [e.template_dict() for e in self.entities]
        return data
