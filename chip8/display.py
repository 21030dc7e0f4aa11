"""
Frame sinks.  A sink is anything with ``show(frame)``, where frame is a
row-major tuple of 32 rows of 64 bools (``frame[y][x]``).  Sinks are
called on the cpu thread after every clear and draw, so they must not
block for long.
"""

import sys
import threading

from .machine import blank_frame


class NullDisplay:
    def show(self, frame):
        pass


class TerminalDisplay:
    def __init__(self, stream=None, on='#', off=' ', home=True):
        self.stream = stream
        self.on, self.off = on, off
        self.home = home # redraw in place instead of scrolling.

    def render(self, frame):
        return '\n'.join(
            ''.join(self.on if pixel else self.off for pixel in row)
            for row in frame)

    def show(self, frame):
        out = sys.stdout if self.stream is None else self.stream
        out.write(('\x1b[H' if self.home else '\n') + self.render(frame) + '\n')
        out.flush()


class FrameBufferDisplay:
    """Keeps the latest frame for a render loop running on another thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frame = blank_frame()
        self._version = 0

    def show(self, frame):
        with self._lock:
            self._frame = frame
            self._version += 1

    def snapshot(self):
        with self._lock:
            return self._version, self._frame
