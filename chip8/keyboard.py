"""
Key sources.  Anything with a blocking ``next_key()`` returning 0x0-0xf
(or raising KeySourceClosed) will do; only Fx0A ever calls it.
"""

import queue
import threading

from .errors import KeySourceClosed

# hex keypad:     mapped to:
#   1 2 3 c         1 2 3 4
#   4 5 6 d         q w e r
#   7 8 9 e         a s d f
#   a 0 b f         z x c v
char_map = dict(zip('1234qwerasdfzxcv', (
    0x1, 0x2, 0x3, 0xc,
    0x4, 0x5, 0x6, 0xd,
    0x7, 0x8, 0x9, 0xe,
    0xa, 0x0, 0xb, 0xf)))

_CLOSED = object()


class QueueKeySource:
    """Single-producer, single-consumer hand-off of key presses."""

    def __init__(self):
        self._queue = queue.Queue()
        self.closed = False

    def press(self, key):
        if not 0x0 <= key <= 0xf:
            raise ValueError('key out of range: %r' % key)
        if not self.closed:
            self._queue.put(key)

    def close(self):
        if not self.closed:
            self.closed = True
            self._queue.put(_CLOSED)

    def next_key(self):
        key = self._queue.get()
        if key is _CLOSED:
            self._queue.put(_CLOSED) # stay closed for the next caller.
            raise KeySourceClosed('key source closed while waiting for a key')
        return key


class StreamKeyReader:
    """Polls a text stream one character at a time and forwards keypad
    presses to a key source.  End of stream closes the source."""

    def __init__(self, stream, keys, keymap=None):
        self.stream = stream
        self.keys = keys
        self.keymap = char_map if keymap is None else keymap
        self._thread = None

    def start(self):
        # daemon: a read blocked on a tty can't be cancelled.
        self._thread = threading.Thread(target=self._run, daemon=True,
            name='chip8-keys')
        self._thread.start()
        return self._thread

    def _run(self):
        try:
            while True:
                ch = self.stream.read(1)
                if not ch:
                    break
                key = self.keymap.get(ch.lower())
                if key is not None:
                    self.keys.press(key)
        finally:
            self.keys.close()
