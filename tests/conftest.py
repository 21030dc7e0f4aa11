import random

import pytest

from chip8 import Chip8, Config


class RecordingDisplay:
    def __init__(self):
        self.frames = []

    def show(self, frame):
        self.frames.append(frame)


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def make_vm(display):
    """Build an unthrottled vm around a program and the recording display."""
    def make(program=b'', **config):
        return Chip8(bytes(program), display=display,
            config=Config(speed=0, **config), rng=random.Random(8))
    return make


@pytest.fixture
def vm(make_vm):
    return make_vm()
