#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
import argparse

from typing import Optional, List, Union

import stgcon
import stgcon.args
import stgcon.series

from stgcon.selection import Session, SelectionRequest, resolve_patches, resolve_patch

logger = stgcon.logger

# Commands that change or remove several patches at once
MULTI_SELECTION = dict(use_range=True, use_marks=True, use_point=True, require_match=True)
SINGLE_SELECTION = dict(use_point=True, require_match=True)

EDIT_SELECTION = SelectionRequest(prompt='Edit patch', **SINGLE_SELECTION)
FLOAT_SELECTION = SelectionRequest(prompt='Float patch', **MULTI_SELECTION)
SINK_SELECTION = SelectionRequest(prompt='Sink patch', **MULTI_SELECTION)
RENAME_SELECTION = SelectionRequest(prompt='Rename patch', **SINGLE_SELECTION)
COMMIT_SELECTION = SelectionRequest(prompt='Commit patch', **MULTI_SELECTION)
DELETE_SELECTION = SelectionRequest(prompt='Delete patch', **MULTI_SELECTION)
GOTO_SELECTION = SelectionRequest(prompt='Goto patch', **SINGLE_SELECTION)
MAIL_SELECTION = SelectionRequest(prompt='Mail patch', **MULTI_SELECTION)
SHOW_SELECTION = SelectionRequest(prompt='Show patch', **SINGLE_SELECTION)
REFRESH_SELECTION = SelectionRequest(use_point=True, require_match=True)


def run_engine(session: Session, verb: str, args=None, patches: Optional[List[str]] = None,
               background: bool = False) -> Union[str, stgcon.BackgroundInvocation]:
    """Invoke stg and bring the session up to date.

    Foreground runs block, raise EngineInvocationError on failure and
    re-read the series. Background runs are handed to the session, which
    re-reads the series once they finish.
    """
    if verb == 'mail':
        args = stgcon.args.build_mail_args(args or [])
    cmdargs = stgcon.args.build_command(verb, args, patches)
    if background:
        bg = stgcon.stg_start_background(cmdargs)
        session.pending.append(bg)
        return bg

    ecode, out = stgcon.stg_run_command(cmdargs)
    if ecode > 0:
        raise stgcon.EngineInvocationError([stgcon.get_stg_executable()] + cmdargs, ecode, out)
    if out.strip():
        logger.info(out.strip())
    session.refresh()
    return out


def stg_init(session: Session) -> str:
    return run_engine(session, 'init')


def new_patch(session: Session, name: Optional[str] = None, message: Optional[str] = None):
    args = list()
    if message is not None:
        args += ['-m', message]
    if name:
        args.append(name)
    # Without a message stg opens an editor for it
    return run_engine(session, 'new', args, background=message is None)


def edit_patch(session: Session, message: Optional[str] = None):
    patch = resolve_patch(session, EDIT_SELECTION)
    args = list()
    if message is not None:
        args += ['-m', message]
    return run_engine(session, 'edit', args, [patch], background=message is None)


def float_patches(session: Session, keep: bool = False) -> str:
    patches = stgcon.series.canonical_order(resolve_patches(session, FLOAT_SELECTION))
    args = ['--keep'] if keep else None
    return run_engine(session, 'float', args, patches)


def sink_patches(session: Session, target: Optional[str] = None, nopush: bool = False,
                 keep: bool = False) -> str:
    patches = stgcon.series.canonical_order(resolve_patches(session, SINK_SELECTION))
    args = [
        ['--to', target] if target else None,
        '--nopush' if nopush else None,
        '--keep' if keep else None,
    ]
    return run_engine(session, 'sink', args, patches)


def rename_patch(session: Session, new_name: Optional[str] = None) -> str:
    old_name = resolve_patch(session, RENAME_SELECTION)
    if not new_name:
        new_name = session.ask(f'Rename {old_name} to: ')
    if not new_name:
        raise stgcon.SelectionError('No new patch name given')
    if new_name == old_name:
        logger.info('Patch name unchanged.')
        return ''
    return run_engine(session, 'rename', patches=[old_name, new_name])


def commit_patches(session: Session, commitall: bool = False, number: Optional[int] = None) -> str:
    if commitall:
        return run_engine(session, 'commit', ['--all'])
    if number is not None:
        return run_engine(session, 'commit', ['-n', str(number)])
    patches = stgcon.series.canonical_order(resolve_patches(session, COMMIT_SELECTION))
    return run_engine(session, 'commit', patches=patches)


def uncommit_patches(session: Session, number: Optional[int] = None) -> str:
    args = ['-n', str(number)] if number is not None else None
    return run_engine(session, 'uncommit', args)


def refresh_patch(session: Session, index: Optional[bool] = None) -> str:
    if index is None:
        index = stgcon.config_bool('refresh-index')
    args = list()
    if index:
        if not stgcon.git_has_staged_changes():
            if not stgcon.config_bool('refresh-prompt-stage-all'):
                raise stgcon.PreconditionError('Nothing staged to refresh from')
            if not session.ask_yes_no('Nothing staged. Stage everything?'):
                raise stgcon.PreconditionError('Nothing staged to refresh from')
            ecode, out = stgcon.git_run_command(['add', '--all'], logstderr=True)
            if ecode > 0:
                raise stgcon.EngineInvocationError(['git', 'add', '--all'], ecode, out)
        args.append('--index')

    # Refresh the patch at point, or the topmost one
    point = session.get_entry(session.point) if session.point else None
    if point is not None and not point.current:
        patch = resolve_patch(session, REFRESH_SELECTION)
        args += ['-p', patch]
    return run_engine(session, 'refresh', args)


def repair(session: Session) -> str:
    return run_engine(session, 'repair')


def rebase_update_remote(remote: str) -> stgcon.BackgroundInvocation:
    logger.info('Updating remote %s', remote)
    return stgcon.git_start_background(['remote', 'update', remote])


def rebase_onto(session: Session, upstream: str) -> str:
    logger.info('Rebasing onto %s', upstream)
    return run_engine(session, 'rebase', [upstream])


def rebase(session: Session, update_remote: Optional[bool] = None) -> str:
    """Rebase the stack onto the branch upstream.

    The remote update runs in the background and the rebase follows as
    soon as the update has been started; it does not wait for the update
    to finish.
    """
    upstream = stgcon.git_get_upstream()
    if not upstream:
        raise stgcon.PreconditionError('Current branch has no upstream to rebase onto')
    remote = stgcon.git_get_remote()
    if update_remote is None:
        policy = str(stgcon.get_main_config().get('rebase-update-remote', 'ask')).lower()
        if policy == 'ask':
            update_remote = remote is not None and session.ask_yes_no(f'Update remote {remote} first?')
        else:
            update_remote = policy in {'yes', 'true', 'y', '1', 'on'}
    if update_remote:
        if remote is None:
            raise stgcon.PreconditionError('Upstream %s is not on a remote' % upstream)
        session.pending.append(rebase_update_remote(remote))
    return rebase_onto(session, upstream)


def get_patch_files(patch: str) -> List[str]:
    return stgcon.stg_get_command_lines(['files', '--bare', patch])


def delete_patches(session: Session, spill: Optional[bool] = None, top: bool = False) -> str:
    if top:
        return run_engine(session, 'delete', ['--top'])
    patches = resolve_patches(session, DELETE_SELECTION)
    if spill is None:
        spill = False
        affected = [patch for patch in patches if get_patch_files(patch)]
        if affected:
            spill = session.ask_yes_no('Spill contents of %s into the work tree?' % ', '.join(affected))
    args = ['--spill'] if spill else None
    out = run_engine(session, 'delete', args, patches)
    session.marks.remove(patches)
    return out


def goto_patch(session: Session) -> str:
    patch = resolve_patch(session, GOTO_SELECTION)
    return run_engine(session, 'goto', patches=[patch])


def undo(session: Session, hard: bool = False) -> str:
    return run_engine(session, 'undo', ['--hard'] if hard else None)


def redo(session: Session, hard: bool = False) -> str:
    return run_engine(session, 'redo', ['--hard'] if hard else None)


def mail_patches(session: Session, extra: Optional[List] = None, cover: Optional[str] = None,
                 auto_recipients: Optional[bool] = None) -> stgcon.BackgroundInvocation:
    patches = stgcon.series.canonical_order(resolve_patches(session, MAIL_SELECTION))
    if auto_recipients is None:
        auto_recipients = stgcon.config_bool('mail-auto-recipients')
    args = [
        extra or None,
        f'--cover={cover}' if cover else None,
        stgcon.args.AUTO_RECIPIENTS_FLAG if auto_recipients else None,
    ]
    return run_engine(session, 'mail', args, patches, background=True)


def show_patch(session: Session) -> str:
    patch = resolve_patch(session, SHOW_SELECTION)
    lines = stgcon.stg_get_command_lines(['id', patch])
    if not lines:
        raise stgcon.EngineInvocationError([stgcon.get_stg_executable(), 'id', patch], 0,
                                           'no commit id returned')
    commit = lines[0].strip()
    ecode, out = stgcon.git_run_command(['show', commit])
    if ecode > 0:
        raise stgcon.EngineInvocationError(['git', 'show', commit], ecode, out)
    return out


def get_session(cmdargs: argparse.Namespace) -> Session:
    """Return the console session, or make one from command-line options."""
    session = getattr(cmdargs, 'session', None)
    if session is not None:
        # The console has its own range and marks
        if getattr(cmdargs, 'range', None) or getattr(cmdargs, 'patches', None):
            raise stgcon.SelectionError('Use v and m to select patches in the console')
        if getattr(cmdargs, 'point', None):
            session.set_point(cmdargs.point)
        return session
    session = Session(interactive=not cmdargs.no_interactive)
    session.refresh()
    point = getattr(cmdargs, 'point', None)
    if point:
        session.set_point(point)
    patchrange = getattr(cmdargs, 'range', None)
    if patchrange:
        if '..' not in patchrange:
            raise stgcon.SelectionError('Range must look like FROM..TO: %s' % patchrange)
        start, end = patchrange.split('..', 1)
        session.set_point(start)
        session.start_range()
        session.set_point(end)
    marks = getattr(cmdargs, 'patches', None)
    if marks:
        session.marks.add(marks)
    return session


def _finish(session: Session, cmdargs: argparse.Namespace,
            result: Union[str, stgcon.BackgroundInvocation, None], editor: bool = False) -> None:
    """Settle a background run started by a command handler.

    The console leaves network runs to finish on their own, but an editor
    shares the terminal with the console prompt, so those are always
    waited for.
    """
    if not isinstance(result, stgcon.BackgroundInvocation):
        return
    if not editor and getattr(cmdargs, 'session', None) is not None:
        # The console picks it up later
        return
    ecode = result.wait()
    if ecode:
        if result in session.pending:
            session.pending.remove(result)
        raise stgcon.EngineInvocationError(result.args, ecode, '')
    session.sync_pending()


def cmd_init(cmdargs: argparse.Namespace) -> None:
    session = getattr(cmdargs, 'session', None) or Session(interactive=not cmdargs.no_interactive)
    stg_init(session)


def cmd_new(cmdargs: argparse.Namespace) -> None:
    session = get_session(cmdargs)
    _finish(session, cmdargs, new_patch(session, cmdargs.name, cmdargs.message),
            editor=cmdargs.message is None)


def cmd_edit(cmdargs: argparse.Namespace) -> None:
    session = get_session(cmdargs)
    _finish(session, cmdargs, edit_patch(session, cmdargs.message), editor=cmdargs.message is None)


def cmd_float(cmdargs: argparse.Namespace) -> None:
    float_patches(get_session(cmdargs), keep=cmdargs.keep)


def cmd_sink(cmdargs: argparse.Namespace) -> None:
    sink_patches(get_session(cmdargs), target=cmdargs.to, nopush=cmdargs.nopush, keep=cmdargs.keep)


def cmd_rename(cmdargs: argparse.Namespace) -> None:
    rename_patch(get_session(cmdargs), cmdargs.new_name)


def cmd_commit(cmdargs: argparse.Namespace) -> None:
    commit_patches(get_session(cmdargs), commitall=cmdargs.all, number=cmdargs.number)


def cmd_uncommit(cmdargs: argparse.Namespace) -> None:
    uncommit_patches(get_session(cmdargs), number=cmdargs.number)


def cmd_refresh(cmdargs: argparse.Namespace) -> None:
    refresh_patch(get_session(cmdargs), index=cmdargs.index)


def cmd_repair(cmdargs: argparse.Namespace) -> None:
    repair(get_session(cmdargs))


def cmd_rebase(cmdargs: argparse.Namespace) -> None:
    session = get_session(cmdargs)
    rebase(session, update_remote=cmdargs.update_remote)
    for bg in list(session.pending):
        _finish(session, cmdargs, bg)


def cmd_delete(cmdargs: argparse.Namespace) -> None:
    delete_patches(get_session(cmdargs), spill=cmdargs.spill, top=cmdargs.top)


def cmd_goto(cmdargs: argparse.Namespace) -> None:
    goto_patch(get_session(cmdargs))


def cmd_undo(cmdargs: argparse.Namespace) -> None:
    undo(get_session(cmdargs), hard=cmdargs.hard)


def cmd_redo(cmdargs: argparse.Namespace) -> None:
    redo(get_session(cmdargs), hard=cmdargs.hard)


def cmd_mail(cmdargs: argparse.Namespace) -> None:
    extra = list()
    for hdr in ('to', 'cc', 'bcc'):
        for addr in getattr(cmdargs, hdr) or list():
            extra.append(f'--{hdr}={addr}')
    if cmdargs.version:
        extra.append(f'--version={cmdargs.version}')
    if cmdargs.prefix:
        extra.append(f'--prefix={cmdargs.prefix}')
    if cmdargs.in_reply_to:
        extra.append(f'--in-reply-to={cmdargs.in_reply_to}')
    if cmdargs.edit_cover:
        extra.append('--edit-cover')
    if cmdargs.edit_patches:
        extra.append('--edit-patches')
    session = get_session(cmdargs)
    _finish(session, cmdargs, mail_patches(session, extra, cover=cmdargs.cover,
                                           auto_recipients=cmdargs.auto_recipients),
            editor=cmdargs.edit_cover or cmdargs.edit_patches)


def cmd_show(cmdargs: argparse.Namespace) -> None:
    print(show_patch(get_session(cmdargs)))
