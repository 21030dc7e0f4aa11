# delay and sound timers, ticked at 60hz on their own thread.
import threading
import time

TIMER_FREQ = 60.0


class Counter:
    """An 8-bit countdown register guarded by a lock.

    The cpu writes it and the ticker decrements it; both go through the
    same lock so neither ever sees a half-finished update.
    """

    def __init__(self, value=0):
        self._lock = threading.Lock()
        self._value = value & 0xff

    def get(self):
        with self._lock:
            return self._value

    def set(self, value):
        with self._lock:
            self._value = value & 0xff

    def tick(self):
        with self._lock:
            if self._value > 0:
                self._value -= 1


class TimerUnit:
    def __init__(self, freq=TIMER_FREQ):
        self.delay = Counter()
        self.sound = Counter()
        self.period = 1.0 / freq
        self._stop = None # set to end the current ticker thread.
        self._thread = None

    def get_delay(self):
        return self.delay.get()

    def set_delay(self, value):
        self.delay.set(value)

    def get_sound(self):
        return self.sound.get()

    def set_sound(self, value):
        self.sound.set(value)

    def tick(self):
        self.delay.tick()
        self.sound.tick()

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        # each ticker gets its own event, so one told to stop stays stopped.
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,),
            daemon=True, name='chip8-timers')
        self._thread.start()

    def stop(self):
        if self._stop is not None: self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self, stop):
        # schedule against absolute deadlines so slow ticks don't drift.
        deadline = time.perf_counter()
        while True:
            deadline += self.period
            if stop.wait(max(0.0, deadline - time.perf_counter())):
                return
            self.tick()
