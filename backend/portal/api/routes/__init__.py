"""Collection of API route modules (tenants, principals, resources, assignments, messages)."""

__all__ = [
    "tenants",
    "principals",
    "resources",
    "assignments",
    "messages",
]
