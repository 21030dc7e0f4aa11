from chip8 import cpu
from chip8.machine import FONT_START, HEIGHT, WIDTH, blank_frame

ZERO = ('####....', '#..#....', '#..#....', '#..#....', '####....')


def lit(frame):
    return {(x, y) for y, row in enumerate(frame)
        for x, pixel in enumerate(row) if pixel}


def pattern(frame, x0, y0, rows, width=8):
    return tuple(''.join('#' if frame[y0 + r][x0 + b] else '.'
        for b in range(width)) for r in range(rows))


def test_draw_glyph(vm, display):
    m = vm.machine
    m.i = FONT_START
    cpu.xdxyn(vm, 0, 1, 5)
    assert m.v[0xf] == 0
    assert len(display.frames) == 1
    assert pattern(display.frames[0], 0, 0, 5) == ZERO


def test_draw_twice_restores_and_flags(vm, display):
    m = vm.machine
    m.i = FONT_START
    m.v[0], m.v[1] = 10, 7
    cpu.xdxyn(vm, 0, 1, 5)
    assert m.v[0xf] == 0
    cpu.xdxyn(vm, 0, 1, 5)
    assert m.v[0xf] == 1
    assert m.frame() == blank_frame()
    assert len(display.frames) == 2


def test_collision_flag_is_sticky(vm):
    m = vm.machine
    m.ram[0x300:0x302] = b'\x80\x80'
    m.screen[0][0] = True # only the first row collides.
    m.i = 0x300
    cpu.xdxyn(vm, 0, 0, 2)
    assert m.v[0xf] == 1
    assert lit(m.frame()) == {(0, 1)}


def test_vf_cleared_before_drawing(vm):
    m = vm.machine
    m.v[0xf] = 1
    m.ram[0x300] = 0x80
    m.i = 0x300
    cpu.xdxyn(vm, 0, 1, 1)
    assert m.v[0xf] == 0


def test_origin_wraps(vm):
    m = vm.machine
    m.ram[0x300] = 0x80
    m.i = 0x300
    m.v[0], m.v[1] = WIDTH + 3, HEIGHT + 2
    cpu.xdxyn(vm, 0, 1, 1)
    assert lit(m.frame()) == {(3, 2)}


def test_sprite_is_clipped_not_wrapped(vm):
    m = vm.machine
    m.ram[0x300:0x304] = b'\xff\xff\xff\xff'
    m.i = 0x300
    m.v[0], m.v[1] = WIDTH - 2, HEIGHT - 1
    m.screen[HEIGHT - 1][0] = True
    m.screen[0][0] = True
    cpu.xdxyn(vm, 0, 1, 4)
    assert lit(m.frame()) == {(WIDTH - 2, HEIGHT - 1), (WIDTH - 1, HEIGHT - 1),
        (0, HEIGHT - 1), (0, 0)}
    assert m.v[0xf] == 0


def test_zero_height_sprite_still_pushes(vm, display):
    cpu.xdxyn(vm, 0, 0, 0)
    assert display.frames == [blank_frame()]


def test_clear(vm, display):
    vm.machine.screen[4][4] = True
    cpu.x00e0(vm)
    assert vm.machine.frame() == blank_frame()
    assert display.frames == [blank_frame()]
