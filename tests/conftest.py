from __future__ import annotations

import pytest

from cm3d2codec.reporting import SilentReporter, set_reporter, set_verbosity


@pytest.fixture(autouse=True)
def _silent_reporter():
    # The CLI swaps the global reporter; keep tests from sharing one.
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield
    set_reporter(SilentReporter())
