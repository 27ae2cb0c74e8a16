"""Exception hierarchy for beanwire.

All framework-specific exceptions inherit from :class:`BeanwireError`, making it
easy to catch any beanwire error with a single ``except BeanwireError`` clause.
"""

from typing import Any


class BeanwireError(Exception):
    """Base exception for all beanwire errors."""

    pass


class ProviderNotFoundError(BeanwireError):
    """Raised when a deferred provider finds no component at the point of use.

    Attributes:
        key: The required type that was not found.
        origin: The component or member that requested the key.
    """

    def __init__(self, key: Any, origin: Any | None = None):
        key_name = getattr(key, "__name__", str(key))
        origin_name = getattr(origin, "__name__", str(origin)) if origin else "lookup"
        super().__init__(f"Provider for key '{key_name}' not found (required by: '{origin_name}')")
        self.key = key
        self.origin = origin


class ComponentCreationError(BeanwireError):
    """Raised when constructing or wiring a component fails.

    Attributes:
        key: The declaring type whose creation failed.
        cause: The original exception that caused the failure.
    """

    def __init__(self, key: Any, cause: Exception):
        k = getattr(key, "__name__", key)
        super().__init__(f"Failed to create component for key: {k}; cause: {cause.__class__.__name__}: {cause}")
        self.key = key
        self.cause = cause


class QualifierIntegrityError(BeanwireError):
    """Raised when a descriptor does not hold exactly one ``Named`` qualifier.

    This is a configuration-integrity violation, not a lookup miss, and is
    never swallowed by the framework.
    """

    def __init__(self, declaring_type: Any, count: int):
        name = getattr(declaring_type, "__name__", str(declaring_type))
        super().__init__(f"Component {name} must have exactly one Named qualifier, found {count}")
        self.declaring_type = declaring_type
        self.count = count


class AmbiguousConstructorError(BeanwireError):
    """Raised when more than one constructor of a class is marked with ``@inject``.

    Attributes:
        declaring_type: The offending class.
        constructors: Names of the marked constructors.
    """

    def __init__(self, declaring_type: type, constructors: list[str]):
        super().__init__(
            f"Component {declaring_type.__name__} has {len(constructors)} @inject constructors "
            f"({', '.join(constructors)}); at most one is allowed"
        )
        self.declaring_type = declaring_type
        self.constructors = constructors


class ScopeError(BeanwireError):
    """Raised for scope-related errors (unknown scope, reserved name)."""

    def __init__(self, msg: str):
        super().__init__(msg)


class ConfigurationError(BeanwireError):
    """Raised for configuration problems (invalid sources, unknown components)."""

    def __init__(self, msg: str):
        super().__init__(msg)


class CircularDependencyError(BeanwireError):
    """Raised when a lookup re-enters a component that is still being created.

    Attributes:
        chain: The components being created, outermost first.
        current: The component requested again.
    """

    def __init__(self, chain: Any, current: Any):
        names = [getattr(k, "__name__", str(k)) for k in (*chain, current)]
        super().__init__("Circular dependency detected: " + " -> ".join(names))
        self.chain = tuple(chain)
        self.current = current
