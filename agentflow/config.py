"""
Workflow Configuration.

Controls which persistence backend suspended workflows are written to,
where it lives, the per-run step limit and event logging. Values are
read from the environment through ``_ENV_MAP``.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field, dataclass, fields
from logging import getLogger
from typing import Any, Dict, Mapping, Optional

from agentflow.exceptions import WorkflowConfigurationError
from agentflow.workflow.persistence import (
    FilePersistence,
    InMemoryPersistence,
    PersistenceInterface,
    SQLitePersistence,
)
from agentflow.workflow.persistence.file_persistence import DEFAULT_EXT, DEFAULT_PREFIX

logger = getLogger(__name__)

BACKEND_OPTIONS = ("memory", "file", "sqlite")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _coerce(raw: str, f: Field) -> Any:
    """Convert an environment string to the dataclass field's type."""
    type_name = f.type if isinstance(f.type, str) else getattr(f.type, "__name__", "str")
    if type_name == "bool":
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise WorkflowConfigurationError(f"Invalid boolean for '{f.name}': {raw!r}")
    if type_name == "int":
        try:
            return int(raw.strip())
        except ValueError as e:
            raise WorkflowConfigurationError(
                f"Invalid integer for '{f.name}': {raw!r}"
            ) from e
    return raw


def read_env_defaults(
    env_map: Mapping[str, str],
    dataclass_fields: Mapping[str, Field],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Collect typed field values from the environment variables in ``env_map``."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = environ.get(env_name)
        if raw is None:
            continue
        values[field_name] = _coerce(raw, dataclass_fields[field_name])
    return values


@dataclass
class WorkflowSettings:
    """Persistence and execution settings for workflows."""

    persistence_backend: str = "memory"
    persistence_dir: str = ""
    persistence_prefix: str = DEFAULT_PREFIX
    persistence_ext: str = DEFAULT_EXT
    sqlite_path: str = ""
    max_steps: int = 0
    log_events: bool = True

    _ENV_MAP = {
        "persistence_backend": "AGENTFLOW_PERSISTENCE_BACKEND",
        "persistence_dir": "AGENTFLOW_PERSISTENCE_DIR",
        "persistence_prefix": "AGENTFLOW_PERSISTENCE_PREFIX",
        "persistence_ext": "AGENTFLOW_PERSISTENCE_EXT",
        "sqlite_path": "AGENTFLOW_SQLITE_PATH",
        "max_steps": "AGENTFLOW_MAX_STEPS",
        "log_events": "AGENTFLOW_LOG_EVENTS",
    }

    @classmethod
    def get_default_instance(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "WorkflowSettings":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__, environ)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "workflow"

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown workflow settings: {sorted(unknown)}")
        values = {k: v for k, v in data.items() if k in known}
        for f in fields(cls):
            if f.name not in values and f.default is MISSING:
                raise WorkflowConfigurationError(f"Missing workflow setting '{f.name}'")
        return cls(**values)


def create_persistence(settings: Optional[WorkflowSettings] = None) -> PersistenceInterface:
    """Build the persistence backend selected by ``settings``."""
    settings = settings or WorkflowSettings.get_default_instance()
    backend = settings.persistence_backend.strip().lower()

    if backend == "memory":
        return InMemoryPersistence()

    if backend == "file":
        if not settings.persistence_dir:
            raise WorkflowConfigurationError(
                "AGENTFLOW_PERSISTENCE_DIR must be set for the 'file' backend"
            )
        return FilePersistence(
            settings.persistence_dir,
            prefix=settings.persistence_prefix,
            ext=settings.persistence_ext,
        )

    if backend == "sqlite":
        if not settings.sqlite_path:
            raise WorkflowConfigurationError(
                "AGENTFLOW_SQLITE_PATH must be set for the 'sqlite' backend"
            )
        return SQLitePersistence(settings.sqlite_path)

    raise WorkflowConfigurationError(
        f"Unknown persistence backend '{settings.persistence_backend}' "
        f"(expected one of: {', '.join(BACKEND_OPTIONS)})"
    )
