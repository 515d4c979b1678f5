#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
#
import argparse
import logging
import stgcon
import sys

logger = stgcon.logger


def cmd_selection_common_opts(sp):
    sp.add_argument('-p', '--point', default=None,
                    help='Act as if the cursor rests on this patch')
    sp.add_argument('-r', '--range', default=None, metavar='FROM..TO',
                    help='Select all patches between FROM and TO (inclusive)')
    sp.add_argument('patches', nargs='*', metavar='PATCH',
                    help='Mark these patches before resolving the selection')


def cmd_series(cmdargs):
    import stgcon.console
    import stgcon.stack
    stgcon.console.print_series(stgcon.stack.get_session(cmdargs))


def cmd_console(cmdargs):
    import stgcon.console
    stgcon.console.main(cmdargs)


def cmd_init(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_init(cmdargs)


def cmd_new(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_new(cmdargs)


def cmd_edit(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_edit(cmdargs)


def cmd_float(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_float(cmdargs)


def cmd_sink(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_sink(cmdargs)


def cmd_rename(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_rename(cmdargs)


def cmd_commit(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_commit(cmdargs)


def cmd_uncommit(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_uncommit(cmdargs)


def cmd_refresh(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_refresh(cmdargs)


def cmd_repair(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_repair(cmdargs)


def cmd_rebase(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_rebase(cmdargs)


def cmd_delete(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_delete(cmdargs)


def cmd_goto(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_goto(cmdargs)


def cmd_undo(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_undo(cmdargs)


def cmd_redo(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_redo(cmdargs)


def cmd_mail(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_mail(cmdargs)


def cmd_show(cmdargs):
    import stgcon.stack
    stgcon.stack.cmd_show(cmdargs)


def setup_subparsers(subparsers) -> None:
    """Register the stack verbs; shared between the CLI and the console."""
    # stgcon init
    sp_init = subparsers.add_parser('init', help='Initialise StGit on the current branch')
    sp_init.set_defaults(func=cmd_init)

    # stgcon new
    sp_new = subparsers.add_parser('new', help='Create a new patch (opens an editor without -m)')
    sp_new.add_argument('-m', '--message', default=None,
                        help='Use this patch description instead of opening an editor')
    sp_new.add_argument('name', nargs='?', default=None,
                        help='Name of the new patch (generated by stg if omitted)')
    sp_new.set_defaults(func=cmd_new)

    # stgcon edit
    sp_edit = subparsers.add_parser('edit', help='Edit the description of a patch')
    cmd_selection_common_opts(sp_edit)
    sp_edit.add_argument('-m', '--message', default=None,
                         help='Use this patch description instead of opening an editor')
    sp_edit.set_defaults(func=cmd_edit)

    # stgcon float
    sp_float = subparsers.add_parser('float', help='Move patches to the top of the stack')
    cmd_selection_common_opts(sp_float)
    sp_float.add_argument('-k', '--keep', action='store_true', default=False,
                          help='Keep the local changes')
    sp_float.set_defaults(func=cmd_float)

    # stgcon sink
    sp_sink = subparsers.add_parser('sink', help='Move patches down the stack')
    cmd_selection_common_opts(sp_sink)
    sp_sink.add_argument('-t', '--to', default=None, metavar='TARGET',
                         help='Sink below this patch instead of to the bottom')
    sp_sink.add_argument('-n', '--nopush', action='store_true', default=False,
                         help='Do not push the patches back after sinking')
    sp_sink.add_argument('-k', '--keep', action='store_true', default=False,
                         help='Keep the local changes')
    sp_sink.set_defaults(func=cmd_sink)

    # stgcon rename
    sp_rename = subparsers.add_parser('rename', help='Rename a patch')
    sp_rename.add_argument('-p', '--point', default=None,
                           help='Rename this patch')
    sp_rename.add_argument('new_name', nargs='?', default=None,
                           help='New patch name (asked for if omitted)')
    sp_rename.set_defaults(func=cmd_rename)

    # stgcon commit
    sp_commit = subparsers.add_parser('commit', help='Turn patches into regular commits')
    cmd_selection_common_opts(sp_commit)
    sp_commit_g = sp_commit.add_mutually_exclusive_group()
    sp_commit_g.add_argument('-a', '--all', action='store_true', default=False,
                             help='Commit all applied patches')
    sp_commit_g.add_argument('-n', '--number', type=int, default=None,
                             help='Commit this many patches from the bottom of the stack')
    sp_commit.set_defaults(func=cmd_commit)

    # stgcon uncommit
    sp_uncommit = subparsers.add_parser('uncommit', help='Turn regular commits into patches')
    sp_uncommit.add_argument('-n', '--number', type=int, default=None,
                             help='Uncommit this many commits')
    sp_uncommit.set_defaults(func=cmd_uncommit)

    # stgcon refresh
    sp_refresh = subparsers.add_parser('refresh', help='Refresh a patch with the work tree changes')
    sp_refresh.add_argument('-p', '--point', default=None,
                            help='Refresh this patch instead of the topmost one')
    sp_refresh_g = sp_refresh.add_mutually_exclusive_group()
    sp_refresh_g.add_argument('-i', '--index', dest='index', action='store_true', default=None,
                              help='Only use changes staged in the index')
    sp_refresh_g.add_argument('--no-index', dest='index', action='store_false',
                              help='Use all work tree changes')
    sp_refresh.set_defaults(func=cmd_refresh)

    # stgcon repair
    sp_repair = subparsers.add_parser('repair', help='Fix StGit metadata after git operations')
    sp_repair.set_defaults(func=cmd_repair)

    # stgcon rebase
    sp_rebase = subparsers.add_parser('rebase', help='Rebase the stack onto the branch upstream')
    sp_rebase_g = sp_rebase.add_mutually_exclusive_group()
    sp_rebase_g.add_argument('-u', '--update-remote', dest='update_remote', action='store_true', default=None,
                             help='Update the remote before rebasing')
    sp_rebase_g.add_argument('--no-update-remote', dest='update_remote', action='store_false',
                             help='Do not update the remote before rebasing')
    sp_rebase.set_defaults(func=cmd_rebase)

    # stgcon delete
    sp_delete = subparsers.add_parser('delete', help='Delete patches')
    cmd_selection_common_opts(sp_delete)
    sp_delete.add_argument('--top', action='store_true', default=False,
                           help='Delete the topmost patch')
    sp_delete_g = sp_delete.add_mutually_exclusive_group()
    sp_delete_g.add_argument('-s', '--spill', dest='spill', action='store_true', default=None,
                             help='Spill the patch contents into the work tree')
    sp_delete_g.add_argument('--no-spill', dest='spill', action='store_false',
                             help='Discard the patch contents')
    sp_delete.set_defaults(func=cmd_delete)

    # stgcon goto
    sp_goto = subparsers.add_parser('goto', help='Push or pop patches until the given one is on top')
    sp_goto.add_argument('-p', '--point', default=None,
                         help='Go to this patch')
    sp_goto.set_defaults(func=cmd_goto)

    # stgcon undo / redo
    for verb, func, desc in (('undo', cmd_undo, 'Undo the last stack operation'),
                             ('redo', cmd_redo, 'Redo the last undone stack operation')):
        sp_ur = subparsers.add_parser(verb, help=desc)
        sp_ur.add_argument('--hard', action='store_true', default=False,
                           help='Discard local changes')
        sp_ur.set_defaults(func=func)

    # stgcon mail
    sp_mail = subparsers.add_parser('mail', help='Send patches by mail with stg mail')
    cmd_selection_common_opts(sp_mail)
    sp_mail.add_argument('--to', action='append', metavar='ADDR',
                         help='Address to add to the To: list (may be repeated)')
    sp_mail.add_argument('--cc', action='append', metavar='ADDR',
                         help='Address to add to the Cc: list (may be repeated)')
    sp_mail.add_argument('--bcc', action='append', metavar='ADDR',
                         help='Address to add to the Bcc: list (may be repeated)')
    sp_mail.add_argument('-c', '--cover', default=None, metavar='FILE',
                         help='Send this cover letter first')
    sp_mail.add_argument('-a', '--auto-recipients', dest='auto_recipients', action='store_true', default=None,
                         help='Add To:, Cc: and Bcc: recipients found in the cover letter')
    sp_mail.add_argument('-v', '--version', default=None,
                         help='Series version to put in the subject prefix')
    sp_mail.add_argument('--prefix', default=None,
                         help='Subject prefix to use instead of PATCH')
    sp_mail.add_argument('--in-reply-to', dest='in_reply_to', default=None, metavar='MSGID',
                         help='Send the series as a reply to this message')
    sp_mail.add_argument('-e', '--edit-cover', dest='edit_cover', action='store_true', default=False,
                         help='Edit the cover letter before sending')
    sp_mail.add_argument('-E', '--edit-patches', dest='edit_patches', action='store_true', default=False,
                         help='Edit each patch before sending')
    sp_mail.set_defaults(func=cmd_mail)

    # stgcon show
    sp_show = subparsers.add_parser('show', help='Show the commit of a patch')
    sp_show.add_argument('-p', '--point', default=None,
                         help='Show this patch')
    sp_show.set_defaults(func=cmd_show)


def setup_parser() -> argparse.ArgumentParser:
    # noinspection PyTypeChecker
    parser = argparse.ArgumentParser(
        prog='stgcon',
        description='An interactive console for StGit patch stacks',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=stgcon.__VERSION__)
    parser.add_argument('-d', '--debug', action='store_true', default=False,
                        help='Add more debugging info to the output')
    parser.add_argument('-q', '--quiet', action='store_true', default=False,
                        help='Output critical information only')
    parser.add_argument('-n', '--no-interactive', action='store_true', default=False,
                        help='Do not ask any interactive questions')

    subparsers = parser.add_subparsers(help='sub-command help', dest='subcmd')

    # stgcon series
    sp_series = subparsers.add_parser('series', help='List the patches in the stack')
    cmd_selection_common_opts(sp_series)
    sp_series.set_defaults(func=cmd_series)

    # stgcon console
    sp_console = subparsers.add_parser('console', help='Work on the stack interactively')
    sp_console.set_defaults(func=cmd_console)

    setup_subparsers(subparsers)

    return parser


def cmd():
    parser = setup_parser()
    cmdargs = parser.parse_args()
    logger.setLevel(logging.DEBUG)

    ch = logging.StreamHandler()
    formatter = logging.Formatter('%(message)s')
    ch.setFormatter(formatter)

    if cmdargs.quiet:
        ch.setLevel(logging.CRITICAL)
    elif cmdargs.debug:
        ch.setLevel(logging.DEBUG)
    else:
        ch.setLevel(logging.INFO)

    logger.addHandler(ch)

    if 'func' not in cmdargs:
        parser.print_help()
        sys.exit(1)

    try:
        cmdargs.func(cmdargs)
    except stgcon.StgconError as ex:
        logger.critical('CRITICAL: %s', ex)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info('')
        sys.exit(130)


if __name__ == '__main__':
    cmd()
