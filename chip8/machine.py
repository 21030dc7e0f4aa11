"""
Machine state: memory, registers, index, program counter, call stack and
the frame buffer.  The cpu is the only thing that mutates it.

The frame buffer is row-major: ``screen[y][x]``, 32 rows of 64 pixels.
"""

from .errors import MemoryBoundsError, RomTooLargeError, StackUnderflowError

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
FONT_START = 0x050
FONT_HEIGHT = 5 # bytes per glyph.
WIDTH, HEIGHT = 64, 32

FONT = bytes((
    0xf0, 0x90, 0x90, 0x90, 0xf0, # 0
    0x20, 0x60, 0x20, 0x20, 0x70, # 1
    0xf0, 0x10, 0xf0, 0x80, 0xf0, # 2
    0xf0, 0x10, 0xf0, 0x10, 0xf0, # 3
    0x90, 0x90, 0xf0, 0x10, 0x10, # 4
    0xf0, 0x80, 0xf0, 0x10, 0xf0, # 5
    0xf0, 0x80, 0xf0, 0x90, 0xf0, # 6
    0xf0, 0x10, 0x20, 0x40, 0x40, # 7
    0xf0, 0x90, 0xf0, 0x90, 0xf0, # 8
    0xf0, 0x90, 0xf0, 0x10, 0xf0, # 9
    0xf0, 0x90, 0xf0, 0x90, 0x90, # a
    0xe0, 0x90, 0xe0, 0x90, 0xe0, # b
    0xf0, 0x80, 0x80, 0x80, 0xf0, # c
    0xe0, 0x90, 0x90, 0x90, 0xe0, # d
    0xf0, 0x80, 0xf0, 0x80, 0xf0, # e
    0xf0, 0x80, 0xf0, 0x80, 0x80, # f
))


def blank_frame():
    return tuple((False,) * WIDTH for _ in range(HEIGHT))


class Machine:
    def __init__(self, program=b''):
        program = bytes(program)
        if len(program) > MAX_PROGRAM_SIZE:
            raise RomTooLargeError(len(program), MAX_PROGRAM_SIZE)

        self.ram = bytearray(MEMORY_SIZE)
        self.ram[FONT_START:FONT_START + len(FONT)] = FONT
        self.ram[PROGRAM_START:PROGRAM_START + len(program)] = program
        self.program_size = len(program)

        self.v = bytearray(16) # V0..VF; VF doubles as the flag register.
        self.i = 0x0
        self.pc = PROGRAM_START
        self.stack = [] # stack pointer modeled by list built-ins.
        self.screen = [[False] * WIDTH for _ in range(HEIGHT)]

    def read(self, addr):
        if not 0 <= addr < MEMORY_SIZE:
            raise MemoryBoundsError(addr, 'read')
        return self.ram[addr]

    def read_block(self, addr, length):
        if addr < 0 or addr + length > MEMORY_SIZE:
            raise MemoryBoundsError(addr, 'read')
        return bytes(self.ram[addr:addr + length])

    def write(self, addr, value):
        if not 0 <= addr < MEMORY_SIZE:
            raise MemoryBoundsError(addr, 'write')
        self.ram[addr] = value & 0xff

    def fetch(self):
        """Read the big-endian word at pc and advance pc past it."""
        pc = self.pc
        if pc < 0 or pc + 1 >= MEMORY_SIZE:
            raise MemoryBoundsError(pc, 'fetch')
        word = (self.ram[pc] << 8) | self.ram[pc + 1]
        self.pc = pc + 2
        return word

    def push(self, addr):
        self.stack.append(addr)

    def pop(self):
        if not self.stack:
            # pc already points past the offending return.
            raise StackUnderflowError(self.pc - 2)
        return self.stack.pop()

    def clear_screen(self):
        for row in self.screen:
            row[:] = [False] * WIDTH

    def frame(self):
        """Immutable snapshot of the frame buffer for a frame sink."""
        return tuple(tuple(row) for row in self.screen)
