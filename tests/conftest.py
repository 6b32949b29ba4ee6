"""
Pytest configuration and fixtures
"""

import pytest
from datetime import timedelta

from importer.importer import MetricImporter
from schemas.metrics import ImporterConfig
from tests.fakes import NOW, FakeChunker, InMemorySink


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def importer_config():
    return ImporterConfig(
        query="sum(node_cpu_seconds_total) by (instance)",
        table_name="node_cpu_raw",
        chunk_size=timedelta(hours=1),
        step_size=timedelta(minutes=5),
    )


@pytest.fixture
def sink():
    return InMemorySink()


@pytest.fixture
def chunker():
    return FakeChunker()


@pytest.fixture
def importer(importer_config, chunker, sink, now):
    return MetricImporter(importer_config, chunker, sink, clock=lambda: now)
