from dataclasses import dataclass

DEFAULT_SPEED = 700 # instructions per second.


@dataclass
class Config:
    speed: int = DEFAULT_SPEED # 0 runs unthrottled.
    # Fx1E sets VF when I moves past 0xfff.
    index_overflow_flag: bool = False
    # 8xy6/8xye shift Vy into Vx, as the cosmac vip did.
    shift_uses_vy: bool = False
    # Fx55/Fx65 leave I pointing past the last register moved.
    memory_increments_index: bool = False
    debug: bool = False # prints per-cycle debug info to stdout.
