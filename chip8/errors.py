# chip-8 fatal conditions. none of these are recoverable: the run stops.


class Chip8Error(Exception):
    pass


# malformed input, raised before anything executes.
class RomTooLargeError(Chip8Error):
    def __init__(self, size, capacity):
        self.size, self.capacity = size, capacity
        Chip8Error.__init__(self, 'rom is %d bytes, only %d fit in memory'
            % (size, capacity))


# invalid state.
class InvalidOpcodeError(Chip8Error):
    def __init__(self, word, addr=None):
        self.word, self.addr = word, addr
        where = '' if addr is None else ' at 0x%03x' % addr
        Chip8Error.__init__(self, 'unknown opcode 0x%04x%s' % (word, where))


class StackUnderflowError(Chip8Error):
    def __init__(self, addr):
        self.addr = addr
        Chip8Error.__init__(self,
            'return with empty call stack at 0x%03x' % addr)


class MemoryBoundsError(Chip8Error):
    def __init__(self, addr, what='access'):
        self.addr = addr
        Chip8Error.__init__(self, 'memory %s out of bounds at 0x%04x'
            % (what, addr))


# collaborator failure: the key source went away mid key-wait.
class KeySourceClosed(Chip8Error):
    pass
