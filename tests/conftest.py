import logging

import pytest

from beanwire import build_descriptor


class ListLogHandler(logging.Handler):
    def __init__(self, sink: list[str]):
        super().__init__(logging.DEBUG)
        self.sink = sink

    def emit(self, record):
        self.sink.append(self.format(record))


@pytest.fixture
def log_capture():
    captured: list[str] = []
    handler = ListLogHandler(captured)
    logger = logging.getLogger("beanwire")
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield captured
    logger.removeHandler(handler)
    logger.setLevel(previous)


class RecordingRegistry:
    """Registry double: fixed values per type, records every lookup and binding."""

    def __init__(self, values=None):
        self.values = dict(values or {})
        self.descriptors = {}
        self.lookups = []
        self.bindings = []

    def lookup(self, required_type, qualifiers=()):
        self.lookups.append(required_type)
        return self.values.get(required_type)

    def get_descriptor(self, declaring_type):
        return self.descriptors.get(declaring_type)

    def get_binding_index(self):
        return self

    def bind_qualifier(self, declaring_type, qualifier):
        self.bindings.append((declaring_type, qualifier))

    def add(self, cls):
        d = build_descriptor(cls, self)
        self.descriptors[cls] = d
        return d


@pytest.fixture
def fake_registry():
    return RecordingRegistry()
