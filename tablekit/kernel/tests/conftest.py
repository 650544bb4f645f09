"""
Kernel test configuration.

Shared sample records and an engine factory. Engines built here use a
ManualScheduler so debounce timing is driven explicitly by the test, and a
fresh MemoryViewModeStore unless a test passes its own.
"""

import pytest

from tablekit.kernel.config import TableConfig
from tablekit.kernel.debounce import ManualScheduler
from tablekit.kernel.engine import TableEngine, default_view_mode_store
from tablekit.kernel.view_mode import MemoryViewModeStore

PRODUCTS = [
    {"id": "p1", "name": "Laptop", "type": "product", "stock": "in_stock", "price": 1200},
    {"id": "p2", "name": "Installation", "type": "service", "stock": "in_stock", "price": 80},
    {"id": "p3", "name": "Mouse", "type": "product", "stock": "low_stock", "price": 25},
    {"id": "p4", "name": "Support plan", "type": "service", "stock": "out_of_stock", "price": 300},
    {"id": "p5", "name": "Office bundle", "type": "combo", "stock": "in_stock", "price": 1500},
]


@pytest.fixture(autouse=True)
def _clear_default_store():
    default_view_mode_store.values.clear()
    yield
    default_view_mode_store.values.clear()


@pytest.fixture
def products():
    return [dict(p) for p in PRODUCTS]


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryViewModeStore()


@pytest.fixture
def make_engine(scheduler, store):
    """Build a TableEngine from TableConfig keyword arguments."""
    engines = []

    def _make(**config):
        engine = TableEngine(TableConfig(**config), store=store, scheduler=scheduler)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.close()
