import inspect
from typing import Iterable, Optional, Union

from .config import TreeSource, apply_config
from .constants import LOGGER
from .exceptions import ConfigurationError
from .registry import ComponentRegistry


def _iter_classes(classes: Union[type, Iterable[type]]) -> Iterable[type]:
    seq = [classes] if inspect.isclass(classes) else classes
    for c in seq:
        if not inspect.isclass(c):
            raise ConfigurationError(f"Only classes can be registered, got {c!r}")
        yield c


def init(
    classes: Union[type, Iterable[type]],
    *,
    config: Optional[TreeSource] = None,
    registry: Optional[ComponentRegistry] = None,
) -> ComponentRegistry:
    """Register *classes* and apply *config* overrides.

    Args:
        classes: A class or an iterable of classes, registered in order.
        config: Optional configuration source; see :func:`apply_config`.
        registry: Registry to populate; a new one is created by default.

    Returns:
        The populated registry.
    """
    reg = registry if registry is not None else ComponentRegistry()
    count = 0
    for cls in _iter_classes(classes):
        reg.register(cls)
        count += 1
    if config is not None:
        apply_config(reg, config)
    LOGGER.info("Registered %d components", count)
    return reg
