"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A bearer (JWT) security scheme attached only to operations that need it

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

# (path suffix, method) pairs reachable without a bearer token
PUBLIC_OPERATIONS: frozenset[tuple[str, str]] = frozenset(
    {
        ("/health", "get"),
        ("/users/login", "post"),
        ("/users", "post"),
        ("/products", "get"),
        ("/products/featured", "get"),
        ("/products/{product_id}", "get"),
    }
)

TAGS_METADATA = [
    {"name": "Users", "description": "Login, registration and profiles."},
    {"name": "Products", "description": "Catalog browsing and admin product management."},
    {"name": "Orders", "description": "Checkout, order history and fulfilment."},
    {"name": "Health", "description": "Liveness checks."},
]


def _is_public(path: str, method: str) -> bool:
    return any(path.endswith(suffix) and method == verb for suffix, verb in PUBLIC_OPERATIONS)


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and bearer security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Token returned by /api/users/login or registration.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            for method, operation in methods.items():
                if isinstance(operation, dict) and not _is_public(path, method):
                    operation["security"] = [{"BearerAuth": []}]

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
