"""
Base factory classes and utilities.

This module provides the foundation for creating test data factories
using factory_boy with async SQLAlchemy support.
"""
from datetime import datetime
from typing import Any
from uuid import uuid4

import factory
from faker import Faker

fake = Faker()


class BaseFactory(factory.Factory):
    """Base factory for all model factories.

    Provides common functionality and patterns for creating test data.
    """

    class Meta:
        abstract = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to handle SQLAlchemy models."""
        return model_class(*args, **kwargs)

    @classmethod
    def create_dict(cls, **kwargs) -> dict[str, Any]:
        """Create a dictionary of column values for the model."""
        obj = cls.build(**kwargs)
        return {
            key: getattr(obj, key)
            for key in cls._meta.model.__table__.columns.keys()
            if hasattr(obj, key) and getattr(obj, key) is not None
        }


def generate_uuid() -> str:
    """Generate a UUID string for use as an ID."""
    return str(uuid4())


def generate_timestamp() -> datetime:
    """Generate a current UTC timestamp."""
    return datetime.utcnow()


def generate_path_segment(prefix: str = "proj") -> str:
    """Generate a project path that satisfies the path format."""
    # Must start with a letter; faker slugs may contain only [a-z0-9-]
    return f"{prefix}-{fake.unique.slug()}"[:60]
