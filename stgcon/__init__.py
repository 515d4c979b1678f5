# SPDX-License-Identifier: GPL-2.0-or-later
# Copyright (C) 2026 by the stgcon contributors
import subprocess
import logging
import copy
import fnmatch
import os
import re

from typing import Optional, Tuple, List

__VERSION__ = '0.3.0'

logger = logging.getLogger('stgcon')

DEFAULT_CONFIG = {
    # Name or path of the StGit executable
    'stg-executable': 'stg',
    # Prefix descriptions with patch names in listings
    'show-patch-name': 'yes',
    # Refresh from the index (staged changes only) by default
    'refresh-index': 'no',
    # When refreshing from an empty index, offer to stage everything
    'refresh-prompt-stage-all': 'yes',
    # yes: always update the remote before rebasing
    # no: never update the remote
    # ask: ask every time
    'rebase-update-remote': 'ask',
    # Harvest To/Cc/Bcc from the cover letter when mailing
    'mail-auto-recipients': 'no',
}

# This is where we store actual config
MAIN_CONFIG = None


class StgconError(Exception):
    pass


class ParseError(StgconError):
    def __init__(self, message: str, line: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.line = line
        self.code = code


class SelectionError(StgconError):
    pass


class EngineInvocationError(StgconError):
    def __init__(self, args: List[str], ecode: int, output: str):
        self.args_run = args
        self.ecode = ecode
        self.output = output
        msg = '%s exited with %s' % (' '.join(args), ecode)
        if output.strip():
            msg += ': %s' % output.strip()
        super().__init__(msg)


class PreconditionError(StgconError):
    pass


class BackgroundInvocation:
    """A detached engine process that shares our terminal.

    Used for verbs that open an editor or talk to the network. The caller
    polls it and re-reads the series once it reports completion.
    """

    def __init__(self, cmdargs: List[str]) -> None:
        self.args = cmdargs
        self.ecode: Optional[int] = None
        logger.debug('Starting in background: %s', ' '.join(cmdargs))
        self._sp = subprocess.Popen(cmdargs)

    @property
    def done(self) -> bool:
        return self.poll() is not None

    def poll(self) -> Optional[int]:
        if self.ecode is None:
            self.ecode = self._sp.poll()
        return self.ecode

    def wait(self) -> int:
        if self.ecode is None:
            self.ecode = self._sp.wait()
        return self.ecode

    def __repr__(self):
        return '<BackgroundInvocation %s ecode=%s>' % (' '.join(self.args), self.ecode)


def _run_command(cmdargs: List[str]) -> Tuple[int, bytes, bytes]:
    logger.debug('Running %s' % ' '.join(cmdargs))
    sp = subprocess.Popen(cmdargs, stdout=subprocess.PIPE, stdin=subprocess.PIPE, stderr=subprocess.PIPE)
    (output, error) = sp.communicate()

    return sp.returncode, output, error


def git_run_command(args: List[str], logstderr: bool = False) -> Tuple[int, str]:
    cmdargs = ['git', '--no-pager'] + args
    ecode, out, err = _run_command(cmdargs)
    out = out.decode(errors='replace')

    if logstderr and len(err.strip()):
        err = err.decode(errors='replace')
        logger.debug('Stderr: %s', err)
        out += err

    return ecode, out


def git_get_command_lines(args: list) -> List[str]:
    ecode, out = git_run_command(args)
    lines = list()
    if out:
        for line in out.split('\n'):
            if line == '':
                continue
            lines.append(line)

    return lines


def get_stg_executable() -> str:
    config = get_main_config()
    return config.get('stg-executable') or 'stg'


def stg_run_command(args: List[str], logstderr: bool = True) -> Tuple[int, str]:
    cmdargs = [get_stg_executable()] + list(args)
    ecode, out, err = _run_command(cmdargs)
    out = out.decode(errors='replace')
    if logstderr and len(err.strip()):
        err = err.decode(errors='replace')
        logger.debug('Stderr: %s', err)
        out += err

    return ecode, out


def stg_get_command_lines(args: List[str]) -> List[str]:
    ecode, out = stg_run_command(args, logstderr=False)
    if ecode > 0:
        raise EngineInvocationError([get_stg_executable()] + list(args), ecode, out)
    return [line for line in out.split('\n') if line.strip()]


def stg_start_background(args: List[str]) -> BackgroundInvocation:
    return BackgroundInvocation([get_stg_executable()] + list(args))


def git_start_background(args: List[str]) -> BackgroundInvocation:
    return BackgroundInvocation(['git', '--no-pager'] + list(args))


def get_config_from_git(regexp: str, defaults: Optional[dict] = None, source: Optional[str] = None) -> dict:
    args = ['config']
    if source:
        args += ['--file', source]
    args += ['-z', '--get-regexp', regexp]
    ecode, out = git_run_command(args)
    gitconfig = defaults
    if not gitconfig:
        gitconfig = dict()
    if not out:
        return gitconfig

    for line in out.split('\x00'):
        if not line:
            continue
        try:
            key, value = line.split('\n', 1)
        except ValueError:
            logger.debug('Ignoring git config entry %s', line)
            continue
        cfgkey = key.split('.')[-1].lower()
        gitconfig[cfgkey] = value

    return gitconfig


def get_main_config() -> dict:
    global MAIN_CONFIG
    if MAIN_CONFIG is None:
        defcfg = copy.deepcopy(DEFAULT_CONFIG)
        # some options can be provided via the toplevel .stgcon-config file,
        # so load them up and use as defaults
        topdir = git_get_toplevel()
        wtglobs = ['show-*', 'refresh-*', 'rebase-*', 'mail-*']
        if topdir:
            wtcfg = os.path.join(topdir, '.stgcon-config')
            if os.access(wtcfg, os.R_OK):
                logger.debug('Loading worktree configs from %s', wtcfg)
                wtconfig = get_config_from_git(r'stgcon\..*', source=wtcfg)
                for key, val in wtconfig.items():
                    for wtglob in wtglobs:
                        if fnmatch.fnmatch(key, wtglob):
                            logger.debug('wtcfg: %s=%s', key, val)
                            defcfg[key] = val
                            break
        MAIN_CONFIG = get_config_from_git(r'stgcon\..*', defaults=defcfg)

    return MAIN_CONFIG


def config_bool(key: str) -> bool:
    config = get_main_config()
    val = config.get(key)
    if val is None:
        return False
    return str(val).strip().lower() in {'yes', 'true', 'y', '1', 'on'}


def git_get_toplevel() -> Optional[str]:
    topdir = None
    # Are we in a git tree and if so, what is our toplevel?
    gitargs = ['rev-parse', '--show-toplevel']
    lines = git_get_command_lines(gitargs)
    if len(lines) == 1:
        topdir = lines[0]
    return topdir


def git_get_current_branch() -> Optional[str]:
    gitargs = ['symbolic-ref', '-q', 'HEAD']
    ecode, out = git_run_command(gitargs)
    if ecode > 0:
        logger.critical('Not able to get current branch (git symbolic-ref HEAD)')
        return None
    return re.sub(r'^refs/heads/', '', out.strip())


def git_get_upstream(branch: Optional[str] = None) -> Optional[str]:
    if branch is None:
        branch = git_get_current_branch()
        if branch is None:
            return None
    gitargs = ['rev-parse', '--abbrev-ref', '--symbolic-full-name', f'{branch}@{{upstream}}']
    ecode, out = git_run_command(gitargs)
    if ecode > 0 or not out.strip():
        return None
    return out.strip()


def git_get_remote(branch: Optional[str] = None) -> Optional[str]:
    if branch is None:
        branch = git_get_current_branch()
        if branch is None:
            return None
    bcfg = get_config_from_git(rf'branch\.{branch}\..*')
    remote = bcfg.get('remote')
    # A '.' remote means the upstream is a local branch
    if not remote or remote == '.':
        return None
    return remote


def git_has_staged_changes() -> bool:
    ecode, out = git_run_command(['diff', '--cached', '--quiet'])
    return ecode != 0
