# chip-8 interpreter: opcode table, decoder and the fetch/decode/execute loop.
import random
import threading
import time

from .config import Config
from .display import NullDisplay
from .errors import InvalidOpcodeError, KeySourceClosed
from .keyboard import QueueKeySource
from .machine import FONT_HEIGHT, FONT_START, HEIGHT, WIDTH, Machine
from .timers import TimerUnit

STOPPED, RUNNING = 'stopped', 'running'

# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

# every instruction takes the vm plus its decoded operands and mutates
# vm.machine in place. none of them touch pc except to jump or skip.

# CLS.  clear the display.
def x00e0(vm):
    vm.machine.clear_screen()
    vm.display.show(vm.machine.frame())

# RET. return from a subroutine.
def x00ee(vm):
    vm.machine.pc = vm.machine.pop()

# JP addr. jump to location nnn.
def x1nnn(vm, nnn):
    vm.machine.pc = nnn

# CALL addr. call subroutine at nnn.
def x2nnn(vm, nnn):
    m = vm.machine
    m.push(m.pc) # pc already points at the next instruction.
    m.pc = nnn

# SE Vx, byte.  skip next instruction if Vx == kk.
def x3xkk(vm, x, kk):
    m = vm.machine
    if m.v[x] == kk: m.pc += 2

# SNE Vx, byte. skip next instruction if Vx != kk.
def x4xkk(vm, x, kk):
    m = vm.machine
    if m.v[x] != kk: m.pc += 2

# SE Vx, Vy.  skip next instruction if Vx == Vy.
def x5xy0(vm, x, y):
    m = vm.machine
    if m.v[x] == m.v[y]: m.pc += 2

# LD Vx, byte. set Vx = kk.
def x6xkk(vm, x, kk):
    vm.machine.v[x] = kk

# ADD Vx, byte. set Vx = Vx + kk. VF untouched.
def x7xkk(vm, x, kk):
    v = vm.machine.v
    v[x] = (v[x] + kk) % 256

# LD Vx, Vy. set Vx = Vy.
def x8xy0(vm, x, y):
    v = vm.machine.v
    v[x] = v[y]

# OR Vx, Vy. set Vx = Vx | Vy.
def x8xy1(vm, x, y):
    v = vm.machine.v
    v[x] = v[x] | v[y]

# AND Vx, Vy. set Vx = Vx & Vy.
def x8xy2(vm, x, y):
    v = vm.machine.v
    v[x] = v[x] & v[y]

# XOR Vx, Vy. set Vx = Vx XOR Vy.
def x8xy3(vm, x, y):
    v = vm.machine.v
    v[x] = v[x] ^ v[y]

# the flag instructions compute both results first and write VF last, so
# VF holds the flag even when x is 0xf.

# ADD Vx, Vy. set Vx = Vx + Vy.  set VF = carry.
def x8xy4(vm, x, y):
    v = vm.machine.v
    result = v[x] + v[y]
    v[x] = result % 256
    v[0xf] = 1 if result > 255 else 0

# SUB Vx, Vy. set Vx = Vx - Vy. set VF = NOT borrow.
def x8xy5(vm, x, y):
    v = vm.machine.v
    flag = 1 if v[x] >= v[y] else 0
    v[x] = (v[x] - v[y]) % 256
    v[0xf] = flag

# SHR Vx {, Vy}. set Vx = Vx SHR 1. set VF = bit shifted out.
def x8xy6(vm, x, y):
    v = vm.machine.v
    src = v[y] if vm.config.shift_uses_vy else v[x]
    v[x] = src >> 1
    v[0xf] = src & 0x1

# SUBN Vx, Vy. set Vx = Vy - Vx. set VF = NOT borrow.
def x8xy7(vm, x, y):
    v = vm.machine.v
    flag = 1 if v[y] >= v[x] else 0
    v[x] = (v[y] - v[x]) % 256
    v[0xf] = flag

# SHL Vx {, Vy}. set Vx = Vx SHL 1. set VF = bit shifted out.
def x8xye(vm, x, y):
    v = vm.machine.v
    src = v[y] if vm.config.shift_uses_vy else v[x]
    v[x] = (src << 1) % 256
    v[0xf] = (src >> 7) & 0x1

# SNE Vx, Vy. skip next instruction if Vx != Vy.
def x9xy0(vm, x, y):
    m = vm.machine
    m.pc += 2 * (m.v[x] != m.v[y])

# LD I, addr. set I = nnn.
def xannn(vm, nnn):
    vm.machine.i = nnn

# JP V0, addr. jump to location nnn + V0.
def xbnnn(vm, nnn):
    m = vm.machine
    m.pc = nnn + m.v[0x0]

# RND Vx, byte. set Vx = random byte AND kk.
def xcxkk(vm, x, kk):
    vm.machine.v[x] = kk & vm.rng.randint(0, 255)

# DRW Vx, Vy, n. display n-byte sprite from RAM location I at (Vx, Vy).
# set VF = collision. the origin wraps, the sprite itself is clipped.
def xdxyn(vm, x, y, n):
    m = vm.machine
    x0, y0 = m.v[x] % WIDTH, m.v[y] % HEIGHT # origin.
    sprite = m.read_block(m.i, n)
    m.v[0xf] = 0

    for r, byte in enumerate(sprite):
        if y0 + r >= HEIGHT: break
        line = m.screen[y0 + r]
        for b in range(8): # msb is the leftmost pixel.
            if x0 + b >= WIDTH: break
            if byte & (0x80 >> b):
                if line[x0 + b]: m.v[0xf] = 1
                line[x0 + b] = not line[x0 + b]

    vm.display.show(m.frame())

# LD Vx, DT. set Vx = delay timer value.
def xfx07(vm, x):
    vm.machine.v[x] = vm.timers.get_delay()

# LD Vx, K. wait for a key press and store its value in Vx.
def xfx0a(vm, x):
    vm.machine.v[x] = vm.keys.next_key()

# LD DT, Vx. set delay timer = Vx.
def xfx15(vm, x):
    vm.timers.set_delay(vm.machine.v[x])

# LD ST, Vx. set sound timer = Vx.
def xfx18(vm, x):
    vm.timers.set_sound(vm.machine.v[x])

# ADD I, Vx. set I = I + Vx. VF = overflow past 0xfff if configured.
def xfx1e(vm, x):
    m = vm.machine
    result = m.i + m.v[x]
    m.i = result & 0xffff
    if vm.config.index_overflow_flag:
        m.v[0xf] = 1 if result > 0xfff else 0

# LD F, Vx. set I = location of sprite for digit Vx.
def xfx29(vm, x):
    m = vm.machine
    m.i = FONT_START + (m.v[x] & 0xf) * FONT_HEIGHT

# LD B, Vx. store BCD of Vx in memory loc I, I + 1, and I + 2.
def xfx33(vm, x):
    m = vm.machine
    vx = m.v[x]
    m.write(m.i, vx // 100)
    m.write(m.i + 1, vx // 10 % 10)
    m.write(m.i + 2, vx % 10)

# LD [I], Vx. store V0 through Vx in RAM, starting at location I.
def xfx55(vm, x):
    m = vm.machine
    for c in range(x + 1): m.write(m.i + c, m.v[c])
    if vm.config.memory_increments_index: m.i = (m.i + x + 1) & 0xffff

# LD Vx, [I]. read V0 through Vx from RAM, starting at location I.
def xfx65(vm, x):
    m = vm.machine
    for c in range(x + 1): m.v[c] = m.read(m.i + c)
    if vm.config.memory_increments_index: m.i = (m.i + x + 1) & 0xffff


# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

inst = { # instruction mask -> function
    0x00e0:x00e0, 0x00ee:x00ee, 0x1000:x1nnn, 0x2000:x2nnn, 0x3000:x3xkk,
    0x4000:x4xkk, 0x5000:x5xy0, 0x6000:x6xkk, 0x7000:x7xkk, 0x8000:x8xy0,
    0x8001:x8xy1, 0x8002:x8xy2, 0x8003:x8xy3, 0x8004:x8xy4, 0x8005:x8xy5,
    0x8006:x8xy6, 0x8007:x8xy7, 0x800e:x8xye, 0x9000:x9xy0, 0xa000:xannn,
    0xb000:xbnnn, 0xc000:xcxkk, 0xd000:xdxyn, 0xf007:xfx07, 0xf00a:xfx0a,
    0xf015:xfx15, 0xf018:xfx18, 0xf01e:xfx1e, 0xf029:xfx29, 0xf033:xfx33,
    0xf055:xfx55, 0xf065:xfx65}

kmasks = { # opcode -> mask selecting the instruction key. default 0xf000.
    0x0:0xffff, 0x5:0xf00f, 0x8:0xf00f, 0x9:0xf00f, 0xf:0xf0ff}

vmasks = { # opcode -> operand fields
    0x0:(), 0x1:('nnn',), 0x2:('nnn',), 0x3:('x', 'kk'), 0x4:('x', 'kk'),
    0x5:('x', 'y'), 0x6:('x', 'kk'), 0x7:('x', 'kk'), 0x8:('x', 'y'),
    0x9:('x', 'y'), 0xa:('nnn',), 0xb:('nnn',), 0xc:('x', 'kk'),
    0xd:('x', 'y', 'n'), 0xf:('x',)}

fields = { # field -> (mask, shift)
    'x':(0x0f00, 8), 'y':(0x00f0, 4), 'n':(0x000f, 0),
    'kk':(0x00ff, 0), 'nnn':(0x0fff, 0)}

def operand(word, field):
    mask, shift = fields[field]
    return (word & mask) >> shift

def decode(word, addr=None): # returns (function, (args...)).
    op = word >> 12
    fn = inst.get(word & kmasks.get(op, 0xf000))
    if fn is None:
        raise InvalidOpcodeError(word, addr)
    return fn, tuple(operand(word, f) for f in vmasks[op])


# # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # # #

class Chip8:
    """The execution engine.

    Owns the machine state and drives it one instruction at a time. The
    display, key source and timer unit are collaborators; anything with
    the same methods can stand in for them.
    """

    def __init__(self, program=b'', display=None, keys=None, timers=None,
            config=None, rng=None):
        self.machine = Machine(program)
        self.display = NullDisplay() if display is None else display
        self.keys = QueueKeySource() if keys is None else keys
        self.timers = TimerUnit() if timers is None else timers
        self.config = Config() if config is None else config
        self.rng = random.Random() if rng is None else rng
        self.state = STOPPED
        self.cycles = 0
        self._halt = threading.Event()

    @property
    def running(self):
        return self.state == RUNNING

    def step(self):
        m = self.machine
        addr = m.pc
        word = m.fetch()
        fn, args = decode(word, addr)
        fn(self, *args)
        self.cycles += 1
        if self.config.debug: self.trace(addr, word, fn, args)

    def run(self, max_cycles=None):
        """Run until halted, a fatal error, or max_cycles instructions."""
        self.state = RUNNING
        self.timers.start()
        interval = 1.0 / self.config.speed if self.config.speed > 0 else None
        deadline = time.perf_counter()
        count = 0

        try:
            while not self._halt.is_set():
                if max_cycles is not None and count >= max_cycles: break
                try:
                    self.step()
                except KeySourceClosed:
                    if self._halt.is_set(): break # host shutdown.
                    raise
                count += 1

                if interval is not None:
                    deadline += interval
                    delay = deadline - time.perf_counter()
                    if delay > 0: time.sleep(delay)
                    elif delay < -0.1: deadline = time.perf_counter() # fell behind, don't burst.
        finally:
            self.timers.stop()
            self._halt.clear() # a halt ends exactly one run.
            self.state = STOPPED

        return count

    def halt(self):
        """Stop the current run after its instruction, or the next run
        before its first one."""
        self._halt.set()

    def trace(self, addr, word, fn, args):
        m = self.machine
        print('%03x: %04x %s %s' % (addr, word, fn.__name__,
            ' '.join(map(hex, args))))
        print('pc %s  dt %s  st %s  i %s' % tuple(map(hex,
            (m.pc, self.timers.get_delay(), self.timers.get_sound(), m.i))))
        vregs = ''
        for i in range(16):
            vregs += '%x:%-5s' % (i, hex(m.v[i]))
            if i == 7: vregs += '\n'
        print(vregs + '\n')
