# beanwire/__init__.py
__version__ = "0.1.0"

from .decorators import (
    Qualifier, Named, DEFAULT,
    inject, Inject,
    component, qualifier, cleanup,
)
from .providers import Provider, SlotProvider
from .slots import InjectionSlot
from .descriptor import ComponentDescriptor
from .builder import build_descriptor
from .resolution import resolve_into
from .construction import Creation, create, create_result, destroy
from .registry import BindingIndex, ComponentRegistry, QualifierBindingIndex, Registry
from .config import DictSource, JsonTreeSource, YamlTreeSource, apply_config
from .api import init

__all__ = [
    "__version__",
    "Qualifier",
    "Named",
    "DEFAULT",
    "inject",
    "Inject",
    "component",
    "qualifier",
    "cleanup",
    "Provider",
    "SlotProvider",
    "InjectionSlot",
    "ComponentDescriptor",
    "build_descriptor",
    "resolve_into",
    "Creation",
    "create",
    "create_result",
    "destroy",
    "Registry",
    "BindingIndex",
    "ComponentRegistry",
    "QualifierBindingIndex",
    "DictSource",
    "JsonTreeSource",
    "YamlTreeSource",
    "apply_config",
    "init",
]
