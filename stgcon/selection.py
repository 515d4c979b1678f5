#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
from dataclasses import dataclass
from typing import Optional, List, Callable

import stgcon
import stgcon.series

from stgcon.marks import MarkStore
from stgcon.series import PatchEntry

logger = stgcon.logger

Prompter = Callable[[str], str]


@dataclass(frozen=True)
class SelectionRequest:
    """Which selection sources a command accepts.

    Sources are tried in a fixed order: visual range, marks, point,
    then the prompt (if one is given).
    """
    use_range: bool = False
    use_marks: bool = False
    use_point: bool = False
    require_match: bool = False
    prompt: Optional[str] = None


def input_prompter(message: str) -> str:
    try:
        return input(message)
    except EOFError:
        return ''


class Session:
    """State of one open series view.

    Owns the parsed series, the marks, the point (the patch under the
    cursor) and the visual range anchor. The range runs from the anchor to
    the point, inclusive.
    """

    def __init__(self, series: Optional[List[PatchEntry]] = None, marks: Optional[MarkStore] = None,
                 interactive: bool = True, prompter: Optional[Prompter] = None) -> None:
        self.series: List[PatchEntry] = list(series) if series is not None else list()
        self.marks = marks if marks is not None else MarkStore()
        self.interactive = interactive
        self.prompter = prompter if prompter is not None else input_prompter
        self.point: Optional[str] = None
        self.anchor: Optional[str] = None
        self.pending: List[stgcon.BackgroundInvocation] = list()

    def names(self) -> List[str]:
        return [entry.name for entry in self.series]

    def get_entry(self, name: str) -> Optional[PatchEntry]:
        for entry in self.series:
            if entry.name == name:
                return entry
        return None

    def refresh(self) -> None:
        self.series = stgcon.series.get_series()
        names = self.names()
        if self.anchor not in names:
            self.anchor = None
        if self.point not in names:
            self.point = None
            for entry in self.series:
                if entry.current:
                    self.point = entry.name
                    break
            if self.point is None and names:
                self.point = names[0]

    def set_point(self, name: Optional[str]) -> None:
        if name is not None and self.get_entry(name) is None:
            raise stgcon.SelectionError('No such patch: %s' % name)
        self.point = name

    def move_point(self, offset: int) -> None:
        names = self.names()
        if not names:
            self.point = None
            return
        if self.point not in names:
            self.point = names[0]
            return
        idx = names.index(self.point) + offset
        idx = max(0, min(len(names) - 1, idx))
        self.point = names[idx]

    def start_range(self) -> None:
        if self.point is None:
            raise stgcon.SelectionError('No patch at point to start a range from')
        self.anchor = self.point

    def clear_range(self) -> None:
        self.anchor = None

    def range_names(self) -> Optional[List[str]]:
        names = self.names()
        if self.anchor not in names or self.point not in names:
            return None
        start = names.index(self.anchor)
        end = names.index(self.point)
        if start > end:
            start, end = end, start
        return names[start:end + 1]

    def marked_entries(self) -> List[PatchEntry]:
        return [entry for entry in self.series if entry.name in self.marks]

    def ask(self, message: str) -> str:
        if not self.interactive:
            raise stgcon.SelectionError('Cannot ask "%s" in non-interactive mode' % message.strip())
        return self.prompter(message).strip()

    def ask_yes_no(self, question: str, default: bool = False) -> bool:
        if not self.interactive:
            return default
        hint = '[Y/n]' if default else '[y/N]'
        answer = self.prompter(f'{question} {hint} ').strip().lower()
        if not answer:
            return default
        return answer in {'y', 'yes'}

    def sync_pending(self) -> List[stgcon.BackgroundInvocation]:
        finished = [bg for bg in self.pending if bg.done]
        if not finished:
            return finished
        for bg in finished:
            self.pending.remove(bg)
            if bg.ecode:
                logger.critical('Background command failed (%s): %s', bg.ecode, ' '.join(bg.args))
            else:
                logger.debug('Background command finished: %s', ' '.join(bg.args))
        self.refresh()
        return finished


def resolve_patches(session: Session, request: SelectionRequest) -> List[str]:
    """Work out which patches a command should act on."""
    if request.use_range:
        selected = session.range_names()
        if selected is not None:
            if request.use_marks:
                intersection = [name for name in selected if name in session.marks]
                if intersection:
                    logger.debug('Using marked patches within range: %s', ', '.join(intersection))
                    return intersection
            logger.debug('Using range: %s', ', '.join(selected))
            return selected

    if request.use_marks and session.marks:
        # Stale marks drop out here
        selected = stgcon.series.canonical_order(session.marks.names(), session.series)
        if selected:
            logger.debug('Using marked patches: %s', ', '.join(selected))
            return selected

    if request.use_point and session.point is not None and session.get_entry(session.point):
        logger.debug('Using patch at point: %s', session.point)
        return [session.point]

    if request.prompt:
        name = session.ask(f'{request.prompt}: ')
        if not name:
            raise stgcon.SelectionError('No patch selected')
        if request.require_match and session.get_entry(name) is None:
            raise stgcon.SelectionError('No such patch: %s' % name)
        return [name]

    raise stgcon.SelectionError('No patch selected')


def resolve_patch(session: Session, request: SelectionRequest) -> str:
    return resolve_patches(session, request)[0]
