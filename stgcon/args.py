#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
import os
import re

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

import stgcon

logger = stgcon.logger

RECIPIENT_RE = re.compile(r'^(To|Cc|Bcc):\s+(.*)\s*$')

# Local instruction to build_mail_args, never passed to stg
AUTO_RECIPIENTS_FLAG = '--auto-recipients'


@dataclass(frozen=True)
class ArgLeaf:
    value: str


@dataclass(frozen=True)
class ArgGroup:
    items: Tuple[Union['ArgLeaf', 'ArgGroup'], ...] = ()


ArgTree = Union[ArgLeaf, ArgGroup]


@dataclass
class Recipients:
    to: List[str] = field(default_factory=list)
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)


def as_tree(obj) -> ArgTree:
    """Turn strings and (nested) lists into an argument tree.

    None entries are skipped, which lets callers write optional arguments
    inline, e.g. ``['--to', target] if target else None``.
    """
    if isinstance(obj, (ArgLeaf, ArgGroup)):
        return obj
    if isinstance(obj, str):
        return ArgLeaf(obj)
    if isinstance(obj, (list, tuple)):
        return ArgGroup(tuple(as_tree(item) for item in obj if item is not None))
    raise TypeError('Cannot use %r as a command argument' % (obj,))


def flatten(tree) -> List[str]:
    if not isinstance(tree, (ArgLeaf, ArgGroup)):
        tree = as_tree(tree)
    if isinstance(tree, ArgLeaf):
        return [tree.value]
    flat = list()
    for item in tree.items:
        flat.extend(flatten(item))
    return flat


def extract_recipients(cover_text: str) -> Recipients:
    recipients = Recipients()
    for line in cover_text.splitlines():
        matches = RECIPIENT_RE.match(line)
        if not matches:
            continue
        hdr, value = matches.groups()
        value = value.strip()
        if '<' in value:
            value = f'"{value}"'
        getattr(recipients, hdr.lower()).append(value)
    return recipients


def recipient_args(recipients: Recipients) -> List[str]:
    args = list()
    for hdr in ('to', 'cc', 'bcc'):
        for value in getattr(recipients, hdr):
            args.append(f'--{hdr}={value}')
    return args


def find_cover_path(args: Sequence[str]) -> Optional[str]:
    for idx, arg in enumerate(args):
        if arg.startswith('--cover='):
            return arg.split('=', 1)[1]
        if arg in {'--cover', '-c'} and idx + 1 < len(args):
            return args[idx + 1]
    return None


def build_mail_args(args) -> List[str]:
    """Flatten mail arguments and expand --auto-recipients.

    With both --auto-recipients and a cover letter, the To/Cc/Bcc lines of
    the cover letter become --to/--cc/--bcc arguments. The flag itself is
    always removed.
    """
    flat = flatten(args)
    if AUTO_RECIPIENTS_FLAG not in flat:
        return flat
    flat = [arg for arg in flat if arg != AUTO_RECIPIENTS_FLAG]
    cover = find_cover_path(flat)
    if not cover:
        logger.debug('No cover letter given, ignoring %s', AUTO_RECIPIENTS_FLAG)
        return flat
    if not os.access(cover, os.R_OK):
        raise stgcon.PreconditionError('Cannot read cover letter %s' % cover)
    with open(cover, 'r', encoding='utf-8') as fh:
        recipients = extract_recipients(fh.read())
    extra = recipient_args(recipients)
    logger.debug('Recipients from %s: %s', cover, ' '.join(extra))
    return flat + extra


def build_command(verb: str, args=None, patches: Optional[Sequence[str]] = None) -> List[str]:
    cmdargs = [verb]
    if args:
        cmdargs += flatten(args)
    if patches:
        cmdargs += ['--'] + list(patches)
    return cmdargs
