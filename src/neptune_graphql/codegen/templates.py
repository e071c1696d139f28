"""
Source template of a generated resolver module.
"""

from __future__ import annotations

MODULE_TEMPLATE = '''"""
AppSync direct Lambda resolver for Amazon Neptune.

Query language: {language}
Execution client: {client}

Generated by neptune-graphql {version} - DO NOT EDIT.
"""

from functools import cache

from neptune_graphql.runtime import (
    PageSettings,
    ResolverRuntime,
    create_executor,
    setup_logging,
)

QUERY_LANGUAGE = {language!r}
EXECUTION_CLIENT = {client!r}
LOG_LEVEL = {log_level!r}

PAGES = PageSettings(default_size={default_page_size}, max_size={max_page_size})

# Per-type fields with compiled hops, and the action serving each operation
SCHEMA = {schema}


def build_runtime(executor=None) -> ResolverRuntime:
    """Build a runtime; ``executor`` defaults to the configured Neptune client."""
    return ResolverRuntime(
        SCHEMA,
        QUERY_LANGUAGE,
        executor or create_executor(EXECUTION_CLIENT),
        PAGES,
    )


@cache
def get_runtime() -> ResolverRuntime:
    """One runtime (and client) per Lambda container."""
    setup_logging(LOG_LEVEL)
    return build_runtime()


def lambda_handler(event, context):
    return get_runtime().handle(event)
'''
