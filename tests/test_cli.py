import os
import sys

import pytest

from chip8 import cli
from chip8.machine import MAX_PROGRAM_SIZE


@pytest.fixture
def rom(tmp_path):
    def write(data):
        path = tmp_path / 'test.ch8'
        path.write_bytes(bytes(data))
        return str(path)
    return write


def test_defaults():
    args = cli.build_parser().parse_args(['pong.ch8'])
    config = cli.config_from_args(args)
    assert args.display == 'pygame'
    assert config.speed == 700
    assert not (config.index_overflow_flag or config.shift_uses_vy
        or config.memory_increments_index or config.debug)


def test_quirk_flags():
    args = cli.build_parser().parse_args(['x.ch8', '--index-overflow-flag',
        '--shift-vy', '--memory-increments-index', '--speed', '0'])
    config = cli.config_from_args(args)
    assert config.index_overflow_flag and config.shift_uses_vy
    assert config.memory_increments_index
    assert config.speed == 0


def test_headless_run(rom, capsys):
    path = rom([0x60, 0x05, 0x12, 0x02])
    assert cli.main([path, '--display', 'none', '--speed', '0',
        '--cycles', '10', '--debug']) == 0
    assert '200: 6005 x6xkk 0x0 0x5' in capsys.readouterr().out


def test_fatal_error_is_reported(rom, capsys):
    path = rom([0x00, 0xee])
    assert cli.main([path, '--display', 'none', '--speed', '0']) == 1
    err = capsys.readouterr().err
    assert 'return with empty call stack at 0x200' in err


def test_rom_too_large(rom, capsys):
    path = rom(bytes(MAX_PROGRAM_SIZE + 1))
    assert cli.main([path, '--display', 'none']) == 1
    assert 'only %d fit' % MAX_PROGRAM_SIZE in capsys.readouterr().err


def test_missing_rom(tmp_path, capsys):
    assert cli.main([str(tmp_path / 'nope.ch8'), '--display', 'none']) == 2
    assert 'cannot read' in capsys.readouterr().err


def test_load_rom(rom):
    assert cli.load_rom(rom(b'\x12\x00')) == b'\x12\x00'


@pytest.fixture
def piped_stdin(monkeypatch):
    """Replace stdin with the read end of a pipe holding the given text."""
    files = []

    def pipe(text):
        r, w = os.pipe()
        os.write(w, text.encode())
        os.close(w)
        stdin = open(r, 'r')
        files.append(stdin)
        monkeypatch.setattr(sys, 'stdin', stdin)
        return stdin

    yield pipe
    for f in files:
        f.close()


# clear; wait for a key into v3; skip the bad opcode only if v3 == 5;
# wait again, which hits end of input.
KEY_ROM = [0x00, 0xe0, 0xf3, 0x0a, 0x33, 0x05, 0xff, 0xff, 0xf3, 0x0a]


def test_terminal_reads_keys_from_stdin(rom, piped_stdin, capsys):
    piped_stdin('w')
    assert cli.main([rom(KEY_ROM), '--display', 'terminal',
        '--speed', '0']) == 1
    out, err = capsys.readouterr()
    assert '\x1b[H' in out
    assert 'key source closed' in err
    assert 'unknown opcode' not in err


def test_terminal_restores_tty_settings(rom, piped_stdin, monkeypatch, capsys):
    termios = pytest.importorskip('termios')
    import tty
    calls = []
    monkeypatch.setattr(cli.os, 'isatty', lambda fd: True)
    monkeypatch.setattr(termios, 'tcgetattr', lambda fd: ['saved'])
    monkeypatch.setattr(termios, 'tcsetattr',
        lambda fd, when, attrs: calls.append(('restore', when, attrs)))
    monkeypatch.setattr(tty, 'setcbreak', lambda fd: calls.append(('cbreak',)))
    piped_stdin('w')

    assert cli.main([rom(KEY_ROM), '--display', 'terminal',
        '--speed', '0']) == 1
    assert calls == [('cbreak',), ('restore', termios.TCSADRAIN, ['saved'])]
    assert '\x1b[2J' in capsys.readouterr().out
