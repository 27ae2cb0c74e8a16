"""Tree-based configuration sources and bootstrap overrides.

Provides the :class:`TreeSource` base class and its concrete implementations
:class:`DictSource`, :class:`JsonTreeSource` and :class:`YamlTreeSource`, and
:func:`apply_config`, which renames, qualifies and rescopes registered
components from a configuration tree::

    components:
      UserService:
        name: users
        scope: prototype
        qualifiers: [primary]
"""

import json
from typing import TYPE_CHECKING, Any, Mapping

from .constants import LOGGER
from .decorators import Qualifier
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .descriptor import ComponentDescriptor
    from .registry import ComponentRegistry

_ENTRY_KEYS = frozenset({"name", "scope", "qualifiers"})


class TreeSource:
    """Base class for tree-structured configuration sources.

    Subclasses must implement :meth:`get_tree` to return a nested mapping.
    """

    def get_tree(self) -> Mapping[str, Any]:
        """Return the configuration tree as a nested mapping.

        Raises:
            NotImplementedError: Always (must be overridden by subclasses).
        """
        raise NotImplementedError


class DictSource(TreeSource):
    """Tree source backed by an in-memory dictionary.

    Example:
        >>> src = DictSource({"components": {"Database": {"scope": "prototype"}}})
        >>> src.get_tree()["components"]["Database"]["scope"]
        'prototype'
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data = data

    def get_tree(self) -> Mapping[str, Any]:
        return self._data


class JsonTreeSource(TreeSource):
    """Tree source that reads configuration from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be loaded or parsed.
    """

    def __init__(self, path: str):
        self._path = path

    def get_tree(self) -> Mapping[str, Any]:
        try:
            with open(self._path, encoding="utf-8") as f:
                return json.load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load JSON config: {e}")


class YamlTreeSource(TreeSource):
    """Tree source that reads configuration from a YAML file.

    Requires ``PyYAML`` to be installed (``pip install beanwire[yaml]``).

    Raises:
        ConfigurationError: If PyYAML is not installed, or if the file
            cannot be loaded or parsed.
    """

    def __init__(self, path: str):
        self._path = path

    def get_tree(self) -> Mapping[str, Any]:
        try:
            import yaml
        except Exception:
            raise ConfigurationError("PyYAML not installed")
        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return data
        except Exception as e:
            raise ConfigurationError(f"Failed to load YAML config: {e}")


def _find_descriptor(registry: "ComponentRegistry", key: str) -> "ComponentDescriptor":
    for d in registry.descriptors():
        cls = d.declaring_type
        if key in (cls.__name__, f"{cls.__module__}.{cls.__qualname__}", d.name):
            return d
    raise ConfigurationError(f"Unknown component in configuration: '{key}'")


def _apply_entry(descriptor: "ComponentDescriptor", key: str, entry: Any) -> None:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Configuration for '{key}' must be a mapping")
    unknown = set(entry) - _ENTRY_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown keys for '{key}': {sorted(unknown)}")

    if "name" in entry:
        descriptor.named(str(entry["name"]))
    qs = entry.get("qualifiers", [])
    if isinstance(qs, str) or not isinstance(qs, list):
        raise ConfigurationError(f"'qualifiers' for '{key}' must be a list")
    if qs:
        descriptor.qualified(*(Qualifier(str(q)) for q in qs))
    if "scope" in entry:
        descriptor.scoped(str(entry["scope"]))


def apply_config(registry: "ComponentRegistry", source: TreeSource) -> None:
    """Apply ``components`` overrides from *source* to registered descriptors.

    Components are matched by class name, dotted path or current name.

    Raises:
        ConfigurationError: On malformed entries or unknown components.
    """
    components = source.get_tree().get("components", {}) or {}
    if not isinstance(components, Mapping):
        raise ConfigurationError("'components' must be a mapping")
    for key, entry in components.items():
        descriptor = _find_descriptor(registry, key)
        _apply_entry(descriptor, key, entry)
        LOGGER.debug("Applied configuration to %r", descriptor)
