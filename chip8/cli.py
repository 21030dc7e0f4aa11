"""
chip8 -- command line front end.

    chip8 PONG.ch8                      # pygame window
    chip8 PONG.ch8 --display terminal   # '#' grid on stdout, keys from stdin
    chip8 PONG.ch8 --display none --cycles 1000 --debug
"""

import argparse
import os
import sys

from .config import DEFAULT_SPEED, Config
from .cpu import Chip8
from .display import NullDisplay, TerminalDisplay
from .errors import Chip8Error
from .keyboard import QueueKeySource, StreamKeyReader


def load_rom(path):
    with open(path, 'rb') as rom_file:
        return rom_file.read()


def build_parser():
    parser = argparse.ArgumentParser(prog='chip8',
        description='CHIP-8 interpreter.',
        formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('rom', help='path to a chip-8 program')
    parser.add_argument('--display', choices=('pygame', 'terminal', 'none'),
        default='pygame', help='where frames go (default: pygame)')
    parser.add_argument('--speed', type=int, default=DEFAULT_SPEED,
        metavar='HZ', help='instructions per second, 0 for unthrottled '
        '(default: %(default)s)')
    parser.add_argument('--scale', type=int, default=10, metavar='N',
        help='pygame window scale factor (default: %(default)s)')
    parser.add_argument('--cycles', type=int, default=None, metavar='N',
        help='stop after N instructions')
    parser.add_argument('--index-overflow-flag', action='store_true',
        help='Fx1E sets VF when I passes 0xfff')
    parser.add_argument('--shift-vy', action='store_true',
        help='8xy6/8xyE shift Vy instead of Vx')
    parser.add_argument('--memory-increments-index', action='store_true',
        help='Fx55/Fx65 advance I past the registers moved')
    parser.add_argument('--debug', action='store_true',
        help='print per-cycle debug info to stdout')
    return parser


def config_from_args(args):
    return Config(speed=args.speed,
        index_overflow_flag=args.index_overflow_flag,
        shift_uses_vy=args.shift_vy,
        memory_increments_index=args.memory_increments_index,
        debug=args.debug)


def run_terminal(vm, cycles):
    """Run with keys read from stdin, one keystroke at a time on a tty."""
    reader = StreamKeyReader(sys.stdin, vm.keys)
    if not os.isatty(sys.stdin.fileno()):
        reader.start()
        return vm.run(cycles)

    import termios, tty
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        sys.stdout.write('\x1b[2J')
        reader.start()
        return vm.run(cycles)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        program = load_rom(args.rom)
    except OSError as e:
        print('chip8: cannot read %s: %s' % (args.rom, e.strerror or e),
            file=sys.stderr)
        return 2

    vm = None
    try:
        if args.display == 'pygame':
            from .frontend import PygameFrontend
            frontend = PygameFrontend(scale=args.scale)
            vm = Chip8(program, display=frontend.display,
                keys=frontend.keys, config=config)
            if args.cycles is not None:
                print('chip8: --cycles is ignored with the pygame display',
                    file=sys.stderr)
            frontend.run(vm)
        elif args.display == 'terminal':
            vm = Chip8(program, display=TerminalDisplay(),
                keys=QueueKeySource(), config=config)
            run_terminal(vm, args.cycles)
        else:
            vm = Chip8(program, display=NullDisplay(), config=config)
            vm.run(args.cycles)
    except Chip8Error as e:
        print('chip8: %s' % e, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        if vm is not None: vm.halt()
        return 130

    return 0


if __name__ == '__main__':
    sys.exit(main())
