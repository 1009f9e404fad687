"""
Generation configuration.

Loaded from YAML:

    malformed_policy: skip          # or fail-closed
    default_status: Upcoming
    parent_task_types: [parent-container, miniAssessmentParent]
    registry_path: catalog/fields.yaml   # optional, packaged default otherwise
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional, Union

import yaml

from taskgen.errors import ConfigError
from taskgen.evaluator import MalformedConditionPolicy
from taskgen.model import DEFAULT_STATUS
from taskgen.registry import CatalogFieldRegistry, load_registry
from taskgen.serialization import PARENT_TASK_TYPES


@dataclass(frozen=True)
class GenerationConfig:
    malformed_policy: MalformedConditionPolicy = MalformedConditionPolicy.SKIP
    default_status: str = DEFAULT_STATUS
    parent_task_types: FrozenSet[str] = field(default_factory=lambda: PARENT_TASK_TYPES)
    registry_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GenerationConfig":
        if not isinstance(data, Mapping):
            raise ConfigError("Config document must be a mapping")

        unknown = set(data) - {"malformed_policy", "default_status", "parent_task_types", "registry_path"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

        try:
            policy = MalformedConditionPolicy(data.get("malformed_policy", MalformedConditionPolicy.SKIP.value))
        except ValueError:
            raise ConfigError(f"Invalid malformed_policy: {data.get('malformed_policy')!r}")

        status = data.get("default_status", DEFAULT_STATUS)
        if not isinstance(status, str) or not status:
            raise ConfigError(f"Invalid default_status: {status!r}")

        parent_types = data.get("parent_task_types")
        if parent_types is None:
            parent_types = PARENT_TASK_TYPES
        elif not isinstance(parent_types, list) or not all(isinstance(t, str) for t in parent_types):
            raise ConfigError("parent_task_types must be a list of strings")

        registry_path = data.get("registry_path")
        return cls(
            malformed_policy=policy,
            default_status=status,
            parent_task_types=frozenset(parent_types),
            registry_path=str(registry_path) if registry_path else None,
        )

    def load_registry(self) -> CatalogFieldRegistry:
        return load_registry(self.registry_path)


def load_config(path: Union[str, Path, None] = None) -> GenerationConfig:
    """
    Read a GenerationConfig from YAML. No path gives the defaults.

    Raises:
        FileNotFoundError: If path doesn't exist
        ConfigError: If the document is invalid
    """
    if path is None:
        return GenerationConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config YAML: {e}")
    return GenerationConfig.from_dict(data or {})
