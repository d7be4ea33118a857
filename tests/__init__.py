"""
Emissions core unit tests
"""

import unittest
from .api import DatabaseReportAPITests, PaginationAPITests, ReportAPITests
from .cli import StandaloneCLITests
from .misc import HelperTests, NoDebugFilterTests, SettingsTests
from .persistence import DatabaseStoreTests
from .store import MemoryStoreTests
from .validator import ValidatorTests


TEST_CLASSES = [
    DatabaseReportAPITests,
    DatabaseStoreTests,
    HelperTests,
    MemoryStoreTests,
    NoDebugFilterTests,
    PaginationAPITests,
    ReportAPITests,
    SettingsTests,
    StandaloneCLITests,
    ValidatorTests,
]


def get_suite() -> unittest.TestSuite:
    suite = unittest.TestSuite()
    for cls in TEST_CLASSES:
        for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
            suite.addTest(cls(fixture))
    return suite
