"""Command line helpers for the planets service.

Example:
-------
    >>> planets-service --export-graphql
    >>> planets-service --export-openapi --output openapi.yaml
    >>> planets-service --serve --port 8000

"""

from __future__ import annotations

# ==============================================================================
# IMPORTS
# ==============================================================================

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import uvicorn
from yaml import safe_dump

from .app import create_app
from .graphql.schema import schema

# ==============================================================================
# EXPORT FUNCTIONS
# ==============================================================================


def export_openapi() -> str:
    """Export the OpenAPI document of the HTTP endpoints as YAML."""
    app = create_app()
    openapi_schema: dict[str, Any] = app.openapi()
    return safe_dump(openapi_schema, sort_keys=False)


def export_graphql() -> str:
    """Export the GraphQL schema definition language (SDL) string."""
    return schema.as_str()


# ==============================================================================
# CLI INTERFACE
# ==============================================================================


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point: export schemas or run the server."""
    parser = argparse.ArgumentParser(description="Planets service utilities")
    parser.add_argument("--export-openapi", action="store_true", help="Print OpenAPI document")
    parser.add_argument("--export-graphql", action="store_true", help="Print GraphQL SDL")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --serve")
    parser.add_argument("--port", type=int, default=8000, help="Bind port for --serve")
    parser.add_argument("--output", type=Path, default=None, help="Optional file path to write")
    args = parser.parse_args(argv)

    if not any([args.export_openapi, args.export_graphql, args.serve]):
        parser.error("Choose at least one option")

    if args.serve:
        uvicorn.run(
            "planets_service.gateway.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
        )
        return

    content = export_openapi() if args.export_openapi else export_graphql()
    if args.output:
        args.output.write_text(content)
    else:
        print(content)


# ==============================================================================
# EXPORTS
# ==============================================================================

__all__ = ["export_graphql", "export_openapi", "main"]


if __name__ == "__main__":  # pragma: no cover
    main()
