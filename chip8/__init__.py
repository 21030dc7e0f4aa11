"""A CHIP-8 interpreter with pluggable frame sinks and key sources."""

from .config import Config
from .cpu import RUNNING, STOPPED, Chip8, decode
from .display import FrameBufferDisplay, NullDisplay, TerminalDisplay
from .errors import (Chip8Error, InvalidOpcodeError, KeySourceClosed,
    MemoryBoundsError, RomTooLargeError, StackUnderflowError)
from .keyboard import QueueKeySource, StreamKeyReader
from .machine import Machine
from .timers import Counter, TimerUnit

__version__ = '0.2.0'
