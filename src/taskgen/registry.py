"""
Catalog Field Registry

Reference table of recognized condition fields: what each one means, where
its value comes from, and which values catalog authors may require.

Used for:
    - validating authored catalog entries (see analyzer)
    - deciding whether an absent field would be scalar or multi-select

IMPORTANT:
    The evaluator never consults this table. It infers scalar vs list from
    the answer value itself. Disagreements between the registry and
    observed answers are reported by analyzer.check_answer_shapes, never
    silently resolved.

The vocabulary is configuration data (data/fields.yaml), versioned with the
catalog, so it can evolve without a code change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from taskgen.answers import canonicalize
from taskgen.errors import RegistryError

DEFAULT_REGISTRY_RESOURCE = "fields.yaml"


class FieldDomain(Enum):
    """Provenance of an answer field."""

    DIRECT = "direct"
    MULTI_SELECT = "multiSelect"
    COMPUTED = "computed"


@dataclass(frozen=True)
class FieldInfo:
    """
    Declares one condition field.

    Properties:
        name: Canonical field name (e.g. "moveDistance")
        description: Human-readable description
        domain: FieldDomain
        allowed_values: Tokens catalog authors may use
        question: Assessment question or derivation note (documentation only)
    """

    name: str
    description: str
    domain: FieldDomain
    allowed_values: Tuple[str, ...] = ()
    question: Optional[str] = None

    @property
    def is_multi_select(self) -> bool:
        return self.domain is FieldDomain.MULTI_SELECT

    def allows(self, token: str) -> bool:
        """Case-insensitive vocabulary check. Empty vocabulary allows anything."""
        if not self.allowed_values:
            return True
        lowered = token.lower()
        return any(value.lower() == lowered for value in self.allowed_values)


@dataclass
class CatalogFieldRegistry:
    """Lookup table of FieldInfo keyed by canonical field name."""

    fields: Dict[str, FieldInfo] = field(default_factory=dict)
    version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CatalogFieldRegistry":
        """
        Build from the YAML document structure:

            version: "..."
            fields:
              fieldName:
                description: ...
                domain: direct | multiSelect | computed
                allowed_values: [...]
                question: ...

        Raises:
            RegistryError: If a field has an unknown domain or bad values
        """
        if not isinstance(data, Mapping):
            raise RegistryError("Registry document must be a mapping")
        raw_fields = data.get("fields") or {}
        if not isinstance(raw_fields, Mapping):
            raise RegistryError("Registry 'fields' must be a mapping")

        fields: Dict[str, FieldInfo] = {}
        for name, spec in raw_fields.items():
            spec = spec or {}
            if not isinstance(spec, Mapping):
                raise RegistryError(f"Field '{name}' must be a mapping")
            try:
                domain = FieldDomain(spec.get("domain", FieldDomain.DIRECT.value))
            except ValueError:
                raise RegistryError(f"Unknown domain for field '{name}': {spec.get('domain')!r}")
            allowed = spec.get("allowed_values") or []
            if not isinstance(allowed, list):
                raise RegistryError(f"allowed_values for field '{name}' must be a list")
            canonical = canonicalize(str(name))
            fields[canonical] = FieldInfo(
                name=canonical,
                description=spec.get("description", ""),
                domain=domain,
                allowed_values=tuple(str(v) for v in allowed),
                question=spec.get("question"),
            )

        version = data.get("version")
        return cls(fields=fields, version=str(version) if version is not None else None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "fields": {
                info.name: {
                    "description": info.description,
                    "domain": info.domain.value,
                    "allowed_values": list(info.allowed_values),
                    "question": info.question,
                }
                for info in self.fields.values()
            },
        }

    def get(self, field_name: str) -> Optional[FieldInfo]:
        return self.fields.get(canonicalize(field_name))

    def __contains__(self, field_name: object) -> bool:
        return isinstance(field_name, str) and canonicalize(field_name) in self.fields

    def __iter__(self) -> Iterator[FieldInfo]:
        return iter(self.fields.values())

    def __len__(self) -> int:
        return len(self.fields)

    def names(self) -> List[str]:
        return list(self.fields.keys())

    def by_domain(self, domain: FieldDomain) -> List[FieldInfo]:
        return [info for info in self.fields.values() if info.domain is domain]

    def expects_list(self, field_name: str) -> Optional[bool]:
        """
        Whether a field's answer should be a list.

        Returns:
            True for multi-select fields, False for other known fields,
            None for fields the registry does not know
        """
        info = self.get(field_name)
        if info is None:
            return None
        return info.is_multi_select


def load_registry(path: Union[str, Path, None] = None) -> CatalogFieldRegistry:
    """
    Load a registry from a YAML file, or the packaged default when path is None.

    Raises:
        FileNotFoundError: If path doesn't exist
        RegistryError: If the document is invalid
    """
    if path is None:
        resource = resources.files("taskgen").joinpath("data").joinpath(DEFAULT_REGISTRY_RESOURCE)
        text = resource.read_text(encoding="utf-8")
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Registry file not found: {path}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid registry YAML: {e}")
    return CatalogFieldRegistry.from_dict(data or {})
