"""
SQLAlchemy declarative base and model import hook.

- Base: Declarative base class for all ORM models.
- new_id(): Default primary key factory (UUID4 text).
- import_all_models(): Imports all modules under portal.models to register mappers.

SQLAlchemy needs model classes to be imported at least once so their tables are
registered on the metadata; import_all_models() does that without hard-coding names.
"""

from __future__ import annotations

import importlib
import pkgutil
import uuid
from typing import List

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, declared_attr

__all__ = ["Base", "new_id", "import_all_models"]


# -------------------------------
# Declarative Base with conventions
# -------------------------------

# Naming conventions for constraints & indexes (helpful for migrations)
_NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=_NAMING_CONVENTION)

    # Default table name (lowercase class name) if not explicitly set
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()


def new_id() -> str:
    return str(uuid.uuid4())


# -------------------------------
# Dynamic model import
# -------------------------------

def import_all_models() -> List[str]:
    """
    Import all modules under portal.models so SQLAlchemy registers all model tables.

    Returns:
        A list of fully-qualified module names that were imported.
    """
    imported: list[str] = []
    models_pkg = importlib.import_module("portal.models")

    prefix = models_pkg.__name__ + "."
    for _finder, name, _ispkg in pkgutil.walk_packages(models_pkg.__path__, prefix):
        importlib.import_module(name)
        imported.append(name)

    return imported
