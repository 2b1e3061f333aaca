##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
SQLite DDL for the prompt catalog.

Array columns (`capabilities`, `images`) hold JSON text. Timestamps are ISO 8601
strings in UTC so that they sort lexically.
"""

import logging

from refinery.backends.store_base import StoreDriver
from refinery.exceptions import BackendNotSupportedError


LOG = logging.getLogger(__name__)

NOW = "(strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"

TABLES = ("ai_providers", "ai_models", "categories", "tags", "prompts", "prompt_tags", "prompt_models")

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS ai_providers (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    website_url TEXT,
    logo_url TEXT,
    created_at TEXT NOT NULL DEFAULT {NOW},
    updated_at TEXT NOT NULL DEFAULT {NOW}
);

CREATE TABLE IF NOT EXISTS ai_models (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    provider_id TEXT NOT NULL REFERENCES ai_providers (id) ON DELETE CASCADE,
    capabilities TEXT NOT NULL DEFAULT '[]',
    context_window INTEGER,
    max_output_tokens INTEGER,
    cost_input_per_million REAL,
    cost_output_per_million REAL,
    created_at TEXT NOT NULL DEFAULT {NOW},
    updated_at TEXT NOT NULL DEFAULT {NOW}
);

CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    parent_id TEXT REFERENCES categories (id) ON DELETE SET NULL,
    created_at TEXT NOT NULL DEFAULT {NOW},
    updated_at TEXT NOT NULL DEFAULT {NOW}
);

CREATE TABLE IF NOT EXISTS tags (
    id TEXT PRIMARY KEY NOT NULL,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT {NOW},
    updated_at TEXT NOT NULL DEFAULT {NOW}
);

CREATE TABLE IF NOT EXISTS prompts (
    id TEXT PRIMARY KEY NOT NULL DEFAULT (lower(hex(randomblob(16)))),
    title TEXT NOT NULL,
    description TEXT,
    content TEXT NOT NULL,
    category_id TEXT REFERENCES categories (id) ON DELETE SET NULL,
    tier TEXT NOT NULL DEFAULT 'free' CHECK (tier IN ('free', 'pro')),
    is_published INTEGER NOT NULL DEFAULT 0,
    is_featured INTEGER NOT NULL DEFAULT 0,
    images TEXT,
    sort_order INTEGER,
    views_count INTEGER NOT NULL DEFAULT 0,
    copies_count INTEGER NOT NULL DEFAULT 0,
    saves_count INTEGER NOT NULL DEFAULT 0,
    published_at TEXT,
    created_at TEXT NOT NULL DEFAULT {NOW},
    updated_at TEXT NOT NULL DEFAULT {NOW}
);

CREATE TABLE IF NOT EXISTS prompt_tags (
    prompt_id TEXT NOT NULL REFERENCES prompts (id) ON DELETE CASCADE,
    tag_id TEXT NOT NULL REFERENCES tags (id) ON DELETE CASCADE,
    created_at TEXT NOT NULL DEFAULT {NOW},
    PRIMARY KEY (prompt_id, tag_id)
);

CREATE TABLE IF NOT EXISTS prompt_models (
    prompt_id TEXT NOT NULL REFERENCES prompts (id) ON DELETE CASCADE,
    model_id TEXT NOT NULL REFERENCES ai_models (id) ON DELETE CASCADE,
    created_at TEXT NOT NULL DEFAULT {NOW},
    PRIMARY KEY (prompt_id, model_id)
);
"""


async def apply_schema(driver: StoreDriver):
    """
    Create every catalog table that does not exist yet.

    Args:
        driver: A driver able to run DDL scripts (`execute_script`).

    Raises:
        BackendNotSupportedError: If the driver cannot run DDL.
    """
    execute_script = getattr(driver, "execute_script", None)
    if execute_script is None:
        raise BackendNotSupportedError(f"The '{driver.get_name()}' driver cannot create the catalog schema.")
    await execute_script(SCHEMA_SQL)
    LOG.info(f"Catalog schema applied with the '{driver.get_name()}' driver.")
