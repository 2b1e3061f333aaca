##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The resource registry of the prompt catalog.

A `Resource` bundles everything the CLI needs to list, import and export one
table: its entity, the select expression used for listing and exporting, the
many-to-many relations accepted as list filters, and its import descriptor
together with the transforms applied on the way in and out.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from refinery.exceptions import ValidationError
from refinery.importer.models import ColumnMapping, ImportDescriptor, ImportRelation
from refinery.query.predicates import EntityRef, RelationConfig
from refinery.utils import split_list


RecordTransform = Callable[[Dict[str, Any]], Dict[str, Any]]

CREATED_AT = ColumnMapping("Created At", "created_at")
TIMESTAMP_FIELDS = ["created_at", "updated_at"]


@dataclass
class Resource:
    """
    One catalog table as seen by the CLI.

    Attributes:
        entity: The table.
        select: Select expression used when listing and exporting.
        relations: Many-to-many relations usable as list filters, keyed by field.
        descriptor: How tabular rows map onto the table.
        export_transform: Flattens a listed record into its export columns.
        import_transform: Prepares a mapped import row for writing.
    """

    entity: EntityRef
    select: str = "*"
    relations: Dict[str, RelationConfig] = field(default_factory=dict)
    descriptor: Optional[ImportDescriptor] = None
    export_transform: Optional[RecordTransform] = None
    import_transform: Optional[RecordTransform] = None

    @property
    def name(self) -> str:
        return self.entity.name


def _related_ids(record: Dict[str, Any], junction: str, related: str) -> List[str]:
    links = record.get(junction) or []
    return [link[related]["id"] for link in links if isinstance(link, dict) and link.get(related)]


def prompt_for_export(record: Dict[str, Any]) -> Dict[str, Any]:
    """Replace the embedded tags and models of a prompt with their ids."""
    flat = {key: val for key, val in record.items() if key not in ("categories", "prompt_tags", "prompt_models")}
    flat["tag_ids"] = _related_ids(record, "prompt_tags", "tags")
    flat["model_ids"] = _related_ids(record, "prompt_models", "ai_models")
    return flat


def model_for_import(record: Dict[str, Any]) -> Dict[str, Any]:
    """Split a comma separated capabilities cell into a list."""
    capabilities = record.get("capabilities")
    if isinstance(capabilities, str):
        record = dict(record, capabilities=split_list(capabilities))
    return record


def _build_resources() -> Dict[str, Resource]:
    prompts = EntityRef("prompts")
    tags = EntityRef("tags")
    ai_models = EntityRef("ai_models")
    ai_providers = EntityRef("ai_providers")
    categories = EntityRef("categories")

    return {
        "prompts": Resource(
            entity=prompts,
            select="*, categories(id, name), prompt_tags(tags(id, name)), prompt_models(ai_models(id, name))",
            relations={
                "tag_id": RelationConfig("prompt_tags", "prompt_id", "tag_id"),
                "model_id": RelationConfig("prompt_models", "prompt_id", "model_id"),
            },
            descriptor=ImportDescriptor(
                resource=prompts,
                columns=[
                    ColumnMapping("ID", "id", "my-prompt-slug"),
                    ColumnMapping("Title", "title", "My Prompt"),
                    ColumnMapping("Description", "description", "A useful prompt"),
                    ColumnMapping("Content", "content", "Prompt content here..."),
                    ColumnMapping("Category ID", "category_id", "marketing"),
                    ColumnMapping("Tier", "tier", "free"),
                    ColumnMapping("Published", "is_published", "true"),
                    ColumnMapping("Featured", "is_featured", "false"),
                    ColumnMapping("Tag IDs", "tag_ids", "seo,copywriting"),
                    ColumnMapping("Model IDs", "model_ids", "gpt-4o,claude-3"),
                    CREATED_AT,
                ],
                relations=[
                    ImportRelation("tag_ids", "tags", "prompt_tags", "prompt_id", "tag_id"),
                    ImportRelation("model_ids", "ai_models", "prompt_models", "prompt_id", "model_id"),
                ],
                exclude_fields=list(TIMESTAMP_FIELDS),
            ),
            export_transform=prompt_for_export,
        ),
        "tags": Resource(
            entity=tags,
            select="*, prompt_tags(count)",
            descriptor=ImportDescriptor(
                resource=tags,
                columns=[ColumnMapping("ID", "id", "seo"), ColumnMapping("Name", "name", "SEO"), CREATED_AT],
                exclude_fields=list(TIMESTAMP_FIELDS),
            ),
        ),
        "categories": Resource(
            entity=categories,
            descriptor=ImportDescriptor(
                resource=categories,
                columns=[
                    ColumnMapping("ID", "id", "marketing"),
                    ColumnMapping("Name", "name", "Marketing"),
                    ColumnMapping("Parent ID", "parent_id", ""),
                    CREATED_AT,
                ],
                exclude_fields=list(TIMESTAMP_FIELDS),
            ),
        ),
        "ai_providers": Resource(
            entity=ai_providers,
            select="*, ai_models(id, name)",
            descriptor=ImportDescriptor(
                resource=ai_providers,
                columns=[
                    ColumnMapping("ID", "id", "openai"),
                    ColumnMapping("Name", "name", "OpenAI"),
                    ColumnMapping("Website", "website_url", "https://openai.com"),
                    ColumnMapping("Logo URL", "logo_url", ""),
                    CREATED_AT,
                ],
                exclude_fields=list(TIMESTAMP_FIELDS),
            ),
        ),
        "ai_models": Resource(
            entity=ai_models,
            select="*, ai_providers(id, name)",
            descriptor=ImportDescriptor(
                resource=ai_models,
                columns=[
                    ColumnMapping("ID", "id", "gpt-4o"),
                    ColumnMapping("Name", "name", "GPT-4o"),
                    ColumnMapping("Provider ID", "provider_id", "openai"),
                    ColumnMapping("Capabilities", "capabilities", "text,vision"),
                    ColumnMapping("Context Window", "context_window", "128000"),
                    ColumnMapping("Max Output", "max_output_tokens", "16384"),
                    ColumnMapping("Cost Input Per Million", "cost_input_per_million", "2.5"),
                    ColumnMapping("Cost Output Per Million", "cost_output_per_million", "10"),
                    CREATED_AT,
                ],
                exclude_fields=list(TIMESTAMP_FIELDS),
            ),
            import_transform=model_for_import,
        ),
    }


RESOURCES: Dict[str, Resource] = _build_resources()


def get_resource(name: str) -> Resource:
    """
    Look up a catalog resource by table name.

    Raises:
        ValidationError: If there is no such resource.
    """
    try:
        return RESOURCES[name]
    except KeyError as exc:
        raise ValidationError(
            f"Unknown resource '{name}'. Available resources: {', '.join(sorted(RESOURCES))}.", field="resource"
        ) from exc
