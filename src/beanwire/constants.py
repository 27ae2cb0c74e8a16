"""Constants used throughout the beanwire framework.

This module defines the internal attribute names stamped onto decorated classes
and functions, the framework logger, and the built-in scope identifiers.
"""

import logging

LOGGER_NAME: str = "beanwire"
"""Default logger name for the beanwire framework."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Pre-configured logger instance for beanwire internal diagnostics."""

INJECT_FLAG: str = "_beanwire_inject"
"""Attribute name marking a constructor or method as an injection point."""

CLEANUP_FLAG: str = "_beanwire_cleanup"
"""Attribute name marking a method as a lifecycle cleanup hook."""

COMPONENT_META: str = "_beanwire_component"
"""Attribute name storing the ``@component`` metadata dictionary (name, scope)."""

QUALIFIERS_KEY: str = "_beanwire_qualifiers"
"""Attribute name storing the class-level qualifiers added by ``@qualifier``."""

SCOPE_SINGLETON: str = "singleton"
"""Built-in scope: one instance per registry lifetime."""

SCOPE_PROTOTYPE: str = "prototype"
"""Built-in scope: a new instance on every lookup."""
