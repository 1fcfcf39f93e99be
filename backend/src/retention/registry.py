"""Registry of entity types known to the retention sweeper.

Configuration refers to models by name (``TRASH_MODELS=task,task_list,project``).
Names are resolved here; a name that is unknown, or that points at a model
without a ``deleted_at`` column, is a configuration error which the sweeper
reports and skips.
"""

from typing import Dict, Type

from models import Notification, Project, SoftDeletes, Task, TaskList, User


class ConfigurationError(Exception):
    """Raised when retention configuration references an unusable entity type."""


class UnknownEntityTypeError(ConfigurationError):
    """Raised for an entity type name that is not registered."""


class NotSoftDeletableError(ConfigurationError):
    """Raised for a registered model that does not support soft deletes."""


MODEL_REGISTRY: Dict[str, Type] = {
    "user": User,
    "project": Project,
    "task_list": TaskList,
    "task": Task,
    "notification": Notification,
}


def resolve_soft_deletable(name: str) -> Type[SoftDeletes]:
    """Resolve an entity type name to a soft-deletable model class.

    Args:
        name: Registered entity type name (case-insensitive)

    Returns:
        The model class

    Raises:
        UnknownEntityTypeError: If the name is not registered
        NotSoftDeletableError: If the model has no soft-delete column
    """
    model = MODEL_REGISTRY.get(name.strip().lower())
    if model is None:
        raise UnknownEntityTypeError(f"Entity type '{name}' does not exist")

    if not issubclass(model, SoftDeletes):
        raise NotSoftDeletableError(
            f"Entity type '{name}' ({model.__name__}) does not use soft deletes"
        )

    return model
