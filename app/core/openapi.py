"""
OpenAPI schema customizations for drf-spectacular.

Groups the generated operations into documentation tags so ReDoc shows the
session lifecycle, social login, user and protected endpoints separately.

Tag naming follows the pattern: [Area] - [Group]
Examples:
- Auth (register, login, refresh, logout, verification, password reset)
- Auth - Social (Google, Facebook, Apple redirects and callbacks)
- User (profile, role changes)
- Protected (demo endpoints gated by the access token)
"""

SOCIAL_PROVIDERS = ("google", "facebook", "apple")

TAG_DESCRIPTIONS = [
    {
        "name": "Auth",
        "description": (
            "Registration, login, refresh token rotation, logout, email "
            "verification and password reset."
        ),
    },
    {
        "name": "Auth - Social",
        "description": "Sign in with Google, Facebook or Apple.",
    },
    {
        "name": "User",
        "description": "Current user's profile and role management.",
    },
    {
        "name": "Protected",
        "description": "Endpoints requiring an active account and, where noted, a role.",
    },
]


def _tag_for(operation_id: str) -> str | None:
    if operation_id.startswith("user_"):
        return "User"
    if operation_id.startswith("protected_"):
        return "Protected"
    if operation_id.startswith("auth_"):
        provider = operation_id.split("_")[1] if "_" in operation_id else ""
        if provider in SOCIAL_PROVIDERS or operation_id.startswith("auth_providers"):
            return "Auth - Social"
        return "Auth"
    return None


def group_auth_endpoints(result, generator, request, public):
    """
    Postprocessing hook assigning tags by operation id prefix.

    Operation ids come from the path with the /api/v1 prefix stripped
    (SCHEMA_PATH_PREFIX), e.g. ``auth_login_create`` or
    ``user_profile_retrieve``. Explicit tags set with ``@extend_schema`` are
    overwritten so grouping stays consistent.
    """
    paths = result.get("paths", {})

    for path, methods in paths.items():
        for method, operation in methods.items():
            if not isinstance(operation, dict):
                continue

            tag = _tag_for(operation.get("operationId", ""))
            if tag:
                operation["tags"] = [tag]

    result["tags"] = TAG_DESCRIPTIONS
    return result
