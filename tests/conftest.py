import pytest  # noqa
import stgcon
import stgcon.series
import os

from typing import List, Optional


class FakeBackground(stgcon.BackgroundInvocation):
    def __init__(self, cmdargs: List[str], ecode: int = 0) -> None:
        self.args = cmdargs
        self.ecode = ecode
        self.waited = False

    def wait(self) -> int:
        self.waited = True
        return self.ecode


class FakeStg:
    """Stands in for the stg executable.

    Answers series queries with the current listing and records every
    other invocation in order. Setting series_error makes series queries
    fail until "init" is run.
    """

    def __init__(self, listing: str) -> None:
        self.listing = listing
        self.calls: List[List[str]] = list()
        self.background: List[List[str]] = list()
        self.handles: List[FakeBackground] = list()
        self.responses = dict()
        self.bg_ecodes = dict()
        self.series_error = None

    def run(self, args: List[str], logstderr: bool = True):
        args = list(args)
        if args == stgcon.series.SERIES_ARGS:
            if self.series_error is not None:
                return self.series_error
            return 0, self.listing
        self.calls.append(args)
        if args[0] == 'init':
            self.series_error = None
        return self.responses.get(args[0], (0, ''))

    def start(self, args: List[str]) -> FakeBackground:
        self.background.append(list(args))
        bg = FakeBackground(['stg'] + list(args), ecode=self.bg_ecodes.get(args[0], 0))
        self.handles.append(bg)
        return bg

    def verbs(self, verb: Optional[str] = None) -> List[List[str]]:
        return [call for call in self.calls if verb is None or call[0] == verb]


@pytest.fixture(scope="function", autouse=True)
def settestdefaults(tmp_path):
    stgcon.MAIN_CONFIG = dict(stgcon.DEFAULT_CONFIG)


@pytest.fixture(scope="function")
def sampledir(request):
    return os.path.join(request.path.parent, 'samples')


@pytest.fixture(scope="function")
def series_text(sampledir):
    with open(os.path.join(sampledir, 'series-simple.txt'), 'r') as fh:
        return fh.read()


@pytest.fixture(scope="function")
def fakestg(monkeypatch, series_text):
    fake = FakeStg(series_text)
    monkeypatch.setattr(stgcon, 'stg_run_command', fake.run)
    monkeypatch.setattr(stgcon, 'stg_start_background', fake.start)
    yield fake
