#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
import argparse
import shlex

from typing import Optional, List

import stgcon
import stgcon.command
import stgcon.series

from rich.console import Console
from rich.text import Text

from stgcon.selection import Session
from stgcon.series import PatchState

logger = stgcon.logger

STATE_STYLES = {
    PatchState.CURRENT: 'bold bright_white',
    PatchState.APPLIED: 'green',
    PatchState.UNAPPLIED: 'default',
    PatchState.HIDDEN: 'dim',
}

HELP_LINES = [
    'n / p         move point to the next / previous patch',
    'point NAME    move point to NAME',
    'v             start or cancel a range at point',
    'm / u / t     mark / unmark / toggle the range (or the patch at point)',
    'U             unmark everything',
    'g             re-read the series',
    'l             list the series',
    'q             quit',
    '',
    'Any stgcon verb (delete, sink --to X, mail -c cover.txt, ...) acts on',
    'the range, the marks or the patch at point, in that order. Only -p is',
    'accepted for picking patches; use v and m instead of -r and names.',
]


def series_text(session: Session) -> Text:
    show_name = stgcon.config_bool('show-patch-name')
    selected = session.range_names() or list()
    text = Text()
    if not session.series:
        text.append('No patches.', style='dim')
        return text
    for entry in session.series:
        row = stgcon.series.get_series_row(entry, marked=entry.name in session.marks, show_name=show_name)
        cursor = '>' if entry.name == session.point else ' '
        inrange = '|' if entry.name in selected else ' '
        text.append(f'{cursor}{inrange}')
        text.append(stgcon.series.format_series_row(row), style=STATE_STYLES[entry.state])
        text.append('\n')
    text.rstrip()
    return text


def print_series(session: Session, console: Optional[Console] = None) -> None:
    if console is None:
        console = Console(highlight=False)
    console.print(series_text(session))


def get_selection(session: Session) -> List[str]:
    selected = session.range_names()
    if selected:
        return selected
    if session.point is not None:
        return [session.point]
    return list()


def setup_console_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='', add_help=False, exit_on_error=False)
    subparsers = parser.add_subparsers(dest='subcmd')
    stgcon.command.setup_subparsers(subparsers)
    return parser


def run_console_command(session: Session, parser: argparse.ArgumentParser, line: str,
                        console: Console) -> bool:
    """Handle one console line. Returns False when the user wants out."""
    try:
        words = shlex.split(line)
    except ValueError as ex:
        logger.critical('Could not parse "%s": %s', line, ex)
        return True
    if not words:
        return True
    word = words[0]
    if word in {'q', 'quit', 'exit'}:
        return False
    if word in {'?', 'help'}:
        for hline in HELP_LINES:
            console.print(hline, highlight=False)
        return True
    if word == 'n':
        session.move_point(1)
    elif word == 'p':
        session.move_point(-1)
    elif word == 'point':
        if len(words) < 2:
            raise stgcon.SelectionError('Usage: point NAME')
        session.set_point(words[1])
    elif word == 'v':
        if session.anchor is None:
            session.start_range()
        else:
            session.clear_range()
    elif word == 'm':
        session.marks.add(get_selection(session))
        session.clear_range()
    elif word == 'u':
        session.marks.remove(get_selection(session))
        session.clear_range()
    elif word == 't':
        session.marks.toggle(get_selection(session))
        session.clear_range()
    elif word == 'U':
        session.marks.clear()
    elif word == 'g':
        session.refresh()
    elif word == 'l':
        pass
    else:
        try:
            cmdargs = parser.parse_args(words)
        except (argparse.ArgumentError, SystemExit) as ex:
            logger.critical('Could not parse "%s": %s', line, ex)
            return True
        if 'func' not in cmdargs:
            logger.critical('Unknown command: %s', word)
            return True
        cmdargs.session = session
        cmdargs.no_interactive = not session.interactive
        cmdargs.func(cmdargs)
        # A command consumes the range
        session.clear_range()
    print_series(session, console)
    return True


def main(cmdargs: argparse.Namespace) -> None:
    session = Session(interactive=not cmdargs.no_interactive)
    try:
        session.refresh()
    except stgcon.EngineInvocationError as ex:
        # Most likely an uninitialised branch, which "init" can fix
        logger.critical('CRITICAL: %s', ex)
        logger.info('Use "init" to start a stack on this branch.')
    console = Console(highlight=False)
    parser = setup_console_parser()
    print_series(session, console)
    while True:
        if session.pending:
            try:
                session.sync_pending()
            except stgcon.StgconError as ex:
                logger.critical('CRITICAL: %s', ex)
        try:
            line = input('stgcon> ')
        except (EOFError, KeyboardInterrupt):
            logger.info('')
            break
        try:
            if not run_console_command(session, parser, line, console):
                break
        except stgcon.StgconError as ex:
            logger.critical('CRITICAL: %s', ex)
        except KeyboardInterrupt:
            logger.info('Aborted.')
