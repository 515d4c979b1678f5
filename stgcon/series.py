#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
import enum
import re

from dataclasses import dataclass
from typing import Optional, List, Iterable, Iterator, Dict

import stgcon

logger = stgcon.logger

# empty marker, state code, name, description
SERIES_LINE_RE = re.compile(r'^(.)(.) (\S+)\s*#\s?(.*)$')

SERIES_ARGS = ['series', '--all', '--empty', '--description']


class PatchState(enum.Enum):
    CURRENT = '>'
    APPLIED = '+'
    UNAPPLIED = '-'
    HIDDEN = '!'

    @classmethod
    def from_code(cls, code: str, line: Optional[str] = None) -> 'PatchState':
        try:
            return _STATE_CODES[code]
        except KeyError:
            raise stgcon.ParseError('Unknown patch state code %r in series line: %r' % (code, line),
                                    line=line, code=code)


_STATE_CODES: Dict[str, PatchState] = {state.value: state for state in PatchState}


@dataclass(frozen=True)
class PatchEntry:
    name: str
    state: PatchState
    empty: bool
    description: str

    @property
    def applied(self) -> bool:
        return self.state in {PatchState.CURRENT, PatchState.APPLIED}

    @property
    def current(self) -> bool:
        return self.state is PatchState.CURRENT


def parse_series_line(line: str) -> PatchEntry:
    matches = SERIES_LINE_RE.match(line)
    if not matches:
        raise stgcon.ParseError('Unable to parse series line: %r' % line, line=line)
    emptymark, code, name, description = matches.groups()
    state = PatchState.from_code(code, line=line)
    # stg prints "0" for patches without content and a space otherwise
    return PatchEntry(name=name, state=state, empty=emptymark != ' ',
                      description=description.rstrip())


def iter_series(lines: Iterable[str]) -> Iterator[PatchEntry]:
    for line in lines:
        line = line.rstrip('\r\n')
        if not line.strip():
            continue
        yield parse_series_line(line)


def parse_series(text: str) -> List[PatchEntry]:
    """Parse a complete ``stg series`` listing.

    An empty listing is a valid, empty series. The first malformed line
    raises ParseError; nothing after it is parsed.
    """
    return list(iter_series(text.split('\n')))


def get_series() -> List[PatchEntry]:
    ecode, out = stgcon.stg_run_command(SERIES_ARGS, logstderr=False)
    if ecode > 0:
        raise stgcon.EngineInvocationError([stgcon.get_stg_executable()] + SERIES_ARGS, ecode, out)
    series = parse_series(out)
    logger.debug('Parsed %s series entries', len(series))
    return series


def canonical_order(names: Iterable[str], series: Optional[List[PatchEntry]] = None) -> List[str]:
    """Return the subset of names found in the series, in stack order."""
    if series is None:
        series = get_series()
    wanted = set(names)
    ordered = list()
    for entry in series:
        if entry.name in wanted and entry.name not in ordered:
            ordered.append(entry.name)
    return ordered


def get_series_row(entry: PatchEntry, marked: bool = False, show_name: bool = True) -> dict:
    return {
        'name': entry.name,
        'state': entry.state,
        'empty': entry.empty,
        'marked': marked,
        'label': entry.name if show_name else None,
        'description': entry.description,
    }


def format_series_row(row: dict) -> str:
    mark = '*' if row['marked'] else ' '
    empty = '0' if row['empty'] else ' '
    parts = [f'{mark}{empty}{row["state"].value}']
    if row['label'] is not None:
        parts.append(f'{row["label"]:<30s}')
    parts.append(row['description'])
    return ' '.join(parts)
