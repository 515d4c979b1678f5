import pytest  # noqa
import stgcon
import stgcon.series

from stgcon.series import PatchEntry, PatchState


@pytest.mark.parametrize('line,expected', [
    ('+> p1 # msg1', PatchEntry('p1', PatchState.CURRENT, True, 'msg1')),
    (' + base-fix # Fix the base', PatchEntry('base-fix', PatchState.APPLIED, False, 'Fix the base')),
    ('0- feature # Add the feature', PatchEntry('feature', PatchState.UNAPPLIED, True, 'Add the feature')),
    (' ! old-idea # Abandoned idea', PatchEntry('old-idea', PatchState.HIDDEN, False, 'Abandoned idea')),
    (' + padded      # Lots of padding', PatchEntry('padded', PatchState.APPLIED, False, 'Lots of padding')),
    (' + nodesc #', PatchEntry('nodesc', PatchState.APPLIED, False, '')),
    (' + hashes # Fix #123 and # 456', PatchEntry('hashes', PatchState.APPLIED, False, 'Fix #123 and # 456')),
])
def test_parse_series_line(line, expected):
    assert stgcon.series.parse_series_line(line) == expected


@pytest.mark.parametrize('line,code', [
    ('-  p2 # msg2', ' '),
    (' ? p3 # msg3', '?'),
    (' * p4 # msg4', '*'),
])
def test_parse_series_line_bad_code(line, code):
    with pytest.raises(stgcon.ParseError) as ex:
        stgcon.series.parse_series_line(line)
    assert ex.value.code == code
    assert repr(code) in str(ex.value)
    assert ex.value.line == line


@pytest.mark.parametrize('line', [
    'garbage',
    ' + no-description-marker',
    '',
])
def test_parse_series_line_malformed(line):
    with pytest.raises(stgcon.ParseError) as ex:
        stgcon.series.parse_series_line(line)
    assert ex.value.code is None


def test_parse_series(series_text):
    series = stgcon.series.parse_series(series_text)
    assert len(series) == len(series_text.strip().split('\n'))
    assert [entry.name for entry in series] == ['base-fix', 'helper', 'wip', 'feature', 'old-idea']
    assert [entry.state for entry in series] == [
        PatchState.APPLIED, PatchState.APPLIED, PatchState.CURRENT, PatchState.UNAPPLIED, PatchState.HIDDEN,
    ]
    assert [entry.empty for entry in series] == [False, False, True, False, False]
    assert [entry.applied for entry in series] == [True, True, True, False, False]
    assert series[2].current


@pytest.mark.parametrize('text', ['', '\n', '  \n\n'])
def test_parse_series_empty(text):
    assert stgcon.series.parse_series(text) == []


def test_iter_series_stops_at_bad_line():
    lines = [' + good # Good patch', ' X bad # Bad patch', ' - never # Never reached']
    parsed = list()
    with pytest.raises(stgcon.ParseError):
        for entry in stgcon.series.iter_series(lines):
            parsed.append(entry)
    assert [entry.name for entry in parsed] == ['good']


def test_entries_are_immutable(series_text):
    entry = stgcon.series.parse_series(series_text)[0]
    with pytest.raises(AttributeError):
        entry.name = 'renamed'


def test_get_series(fakestg):
    series = stgcon.series.get_series()
    assert len(series) == 5
    assert fakestg.calls == []


def test_get_series_failure(monkeypatch):
    monkeypatch.setattr(stgcon, 'stg_run_command',
                        lambda args, logstderr=True: (2, 'stg series: branch not initialized'))
    with pytest.raises(stgcon.EngineInvocationError) as ex:
        stgcon.series.get_series()
    assert ex.value.ecode == 2
    assert 'not initialized' in str(ex.value)


@pytest.mark.parametrize('names,expected', [
    ({'wip', 'base-fix'}, ['base-fix', 'wip']),
    (['feature', 'helper', 'feature'], ['helper', 'feature']),
    ({'deleted-long-ago', 'wip'}, ['wip']),
    (set(), []),
])
def test_canonical_order(series_text, names, expected):
    series = stgcon.series.parse_series(series_text)
    assert stgcon.series.canonical_order(names, series) == expected


def test_canonical_order_requeries(fakestg):
    assert stgcon.series.canonical_order({'old-idea', 'helper'}) == ['helper', 'old-idea']


def test_canonical_order_letters():
    series = [PatchEntry(name, PatchState.APPLIED, False, '') for name in 'ABCD']
    assert stgcon.series.canonical_order({'C', 'A'}, series) == ['A', 'C']


@pytest.mark.parametrize('marked,show_name,expected', [
    (False, True, f'  + {"base-fix":<30s} Fix the base'),
    (True, True, f'* + {"base-fix":<30s} Fix the base'),
    (False, False, '  + Fix the base'),
])
def test_format_series_row(series_text, marked, show_name, expected):
    entry = stgcon.series.parse_series(series_text)[0]
    row = stgcon.series.get_series_row(entry, marked=marked, show_name=show_name)
    assert stgcon.series.format_series_row(row) == expected
