"""OpenAPI customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A Bearer security scheme applied to the admin endpoint only

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

ADMIN_PATH_PREFIX = "/admin"


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and admin security.

    - Injects components.securitySchemes for the admin password (Bearer)
    - Marks operations under ``/admin`` as requiring it; everything else is
      public
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "AdminPassword",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Send the admin password as `Authorization: Bearer <password>`.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Signup", "description": "Public signup form and counter."},
            {"name": "Admin", "description": "Operator listing of collected signups."},
            {"name": "Health", "description": "Liveness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith(ADMIN_PATH_PREFIX):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [{"AdminPassword": []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
