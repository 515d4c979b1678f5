#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
from typing import Iterable, Iterator, Set, Union

import stgcon

logger = stgcon.logger


def _as_names(names: Union[str, Iterable[str]]) -> Set[str]:
    if isinstance(names, str):
        return {names}
    return set(names)


class MarkStore:
    """Patch names marked in one series view.

    Names are never checked against the series: a mark left on a patch
    that no longer exists is simply ignored by whoever reads it.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._marked: Set[str] = set(names)

    def contains(self, name: str) -> bool:
        return name in self._marked

    def add(self, names: Union[str, Iterable[str]]) -> None:
        names = _as_names(names)
        logger.debug('Marking: %s', ', '.join(sorted(names)))
        self._marked.update(names)

    def remove(self, names: Union[str, Iterable[str]]) -> None:
        names = _as_names(names)
        logger.debug('Unmarking: %s', ', '.join(sorted(names)))
        self._marked.difference_update(names)

    def toggle(self, names: Union[str, Iterable[str]]) -> None:
        for name in _as_names(names):
            if name in self._marked:
                self._marked.remove(name)
            else:
                self._marked.add(name)

    def clear(self) -> None:
        self._marked.clear()

    def names(self) -> Set[str]:
        return set(self._marked)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._marked))

    def __len__(self) -> int:
        return len(self._marked)

    def __bool__(self) -> bool:
        return len(self._marked) > 0

    def __repr__(self):
        return '<MarkStore %s>' % ', '.join(sorted(self._marked))
