# pygame window: renders frames and feeds key presses to the cpu thread.
import threading

import pygame

from .display import FrameBufferDisplay
from .keyboard import QueueKeySource
from .machine import HEIGHT, WIDTH

PIXEL_ON, PIXEL_OFF = (255, 255, 255), (0, 0, 0)
FPS = 60

kb_map = { # pygame key -> keypad value
    pygame.K_1:0x1, pygame.K_2:0x2, pygame.K_3:0x3, pygame.K_4:0xc,
    pygame.K_q:0x4, pygame.K_w:0x5, pygame.K_e:0x6, pygame.K_r:0xd,
    pygame.K_a:0x7, pygame.K_s:0x8, pygame.K_d:0x9, pygame.K_f:0xe,
    pygame.K_z:0xa, pygame.K_x:0x0, pygame.K_c:0xb, pygame.K_v:0xf}


def blit_frame(frame, surface):
    surface.fill(PIXEL_OFF)
    for y, row in enumerate(frame):
        for x, pixel in enumerate(row):
            if pixel: surface.set_at((x, y), PIXEL_ON)


class PygameFrontend:
    """Owns the window on the main thread; the cpu runs on a worker.

    Draw to screen0 at native resolution, scale and output to screen1.
    """

    def __init__(self, scale=10, fps=FPS):
        self.scale = scale
        self.fps = fps
        self.display = FrameBufferDisplay()
        self.keys = QueueKeySource()

    def handle(self, event, vm):
        if event.type == pygame.QUIT:
            vm.halt()
            self.keys.close() # wakes a pending key wait.
        elif event.type == pygame.KEYDOWN and event.key in kb_map:
            self.keys.press(kb_map[event.key])

    def run(self, vm):
        errors = []

        def worker():
            try:
                vm.run()
            except Exception as e: # re-raised on the main thread below.
                errors.append(e)

        pygame.init()
        pygame.display.set_caption('chip-8')
        screen0 = pygame.Surface((WIDTH, HEIGHT))
        screen1 = pygame.display.set_mode((WIDTH * self.scale,
            HEIGHT * self.scale))
        clock = pygame.time.Clock()
        shown = -1

        cpu = threading.Thread(target=worker, name='chip8-cpu', daemon=True)
        cpu.start()
        try:
            while cpu.is_alive():
                for event in pygame.event.get(): self.handle(event, vm)
                version, frame = self.display.snapshot()
                if version != shown:
                    blit_frame(frame, screen0)
                    pygame.transform.scale(screen0, screen1.get_size(), screen1)
                    pygame.display.flip()
                    shown = version
                clock.tick(self.fps)
        finally:
            vm.halt()
            self.keys.close()
            cpu.join()
            pygame.quit()

        if errors: raise errors[0]
