import pytest  # noqa
import stgcon


def test_get_config_from_git(monkeypatch):
    out = 'stgcon.stg-executable\n/opt/stg/bin/stg\x00stgcon.refresh-index\nyes\x00'
    monkeypatch.setattr(stgcon, 'git_run_command', lambda args, **kwargs: (0, out))
    config = stgcon.get_config_from_git(r'stgcon\..*', defaults=dict(stgcon.DEFAULT_CONFIG))
    assert config['stg-executable'] == '/opt/stg/bin/stg'
    assert config['refresh-index'] == 'yes'
    assert config['show-patch-name'] == 'yes'


def test_get_main_config_worktree(monkeypatch, tmp_path):
    wtcfg = tmp_path / '.stgcon-config'
    wtcfg.write_text('[stgcon]\n  show-patch-name = no\n')
    stgcon.MAIN_CONFIG = None

    def fake_git(args, **kwargs):
        if args == ['rev-parse', '--show-toplevel']:
            return 0, f'{tmp_path}\n'
        if '--file' in args:
            return 0, 'stgcon.show-patch-name\nno\x00stgcon.stg-executable\n/tmp/evil\x00'
        return 0, 'stgcon.rebase-update-remote\nyes\x00'

    monkeypatch.setattr(stgcon, 'git_run_command', fake_git)
    config = stgcon.get_main_config()
    assert config['show-patch-name'] == 'no'
    assert config['rebase-update-remote'] == 'yes'
    # stg-executable is not taken from the worktree file
    assert config['stg-executable'] == 'stg'


@pytest.mark.parametrize('value,expected', [
    ('yes', True),
    ('True', True),
    ('on', True),
    ('1', True),
    ('no', False),
    ('', False),
    (None, False),
])
def test_config_bool(value, expected):
    stgcon.MAIN_CONFIG['refresh-index'] = value
    assert stgcon.config_bool('refresh-index') is expected


def test_get_stg_executable():
    stgcon.MAIN_CONFIG['stg-executable'] = 'stg-next'
    assert stgcon.get_stg_executable() == 'stg-next'


def test_stg_get_command_lines_failure(monkeypatch):
    monkeypatch.setattr(stgcon, 'stg_run_command', lambda args, logstderr=True: (1, 'stg files: unknown patch'))
    with pytest.raises(stgcon.EngineInvocationError) as ex:
        stgcon.stg_get_command_lines(['files', 'nope'])
    assert ex.value.args_run == ['stg', 'files', 'nope']
    assert 'unknown patch' in str(ex.value)


@pytest.mark.parametrize('out,ecode,expected', [
    ('origin/main\n', 0, 'origin/main'),
    ('', 128, None),
])
def test_git_get_upstream(monkeypatch, out, ecode, expected):
    monkeypatch.setattr(stgcon, 'git_run_command', lambda args, **kwargs: (ecode, out))
    assert stgcon.git_get_upstream('main') == expected


@pytest.mark.parametrize('out,expected', [
    ('branch.main.remote\norigin\x00branch.main.merge\nrefs/heads/main\x00', 'origin'),
    ('branch.main.remote\n.\x00', None),
    ('', None),
])
def test_git_get_remote(monkeypatch, out, expected):
    monkeypatch.setattr(stgcon, 'git_run_command', lambda args, **kwargs: (0, out))
    assert stgcon.git_get_remote('main') == expected
