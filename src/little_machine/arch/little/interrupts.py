# little_machine/arch/little/interrupts.py
"""
割り込み・syscallコントローラ。

INTERRUPT n (n != 0) はベクタテーブルのハンドラへCALLと同じ手順で分岐します。
INTERRUPT 0 はシステム割り込みで、A0のセレクタに従ってホストの文字I/Oを行います。

syscall ABI:
    A0 = セレクタ / A1 = 第1引数 / A2 = 第2引数 / V0 = 戻り値
"""
import logging
from typing import Callable, Dict

from little_machine.transport.bus import Bus, ADDRESS_MASK, MEMORY_SIZE, read_be
from little_machine.transport.console import CONSOLE_PORT, CONSOLE_EOF
from little_machine.arch.little.isa import (
    INTERRUPT_TABLE_BASE, SYS_INTERRUPT, REGISTER_MASK, REG_A0, REG_A1, REG_A2, REG_V0, Syscall,
)
from little_machine.arch.little.state import LittleCpuState
from little_machine.arch.little.stack import push_pc_and_jump

logger = logging.getLogger(__name__)

NEWLINE = 0x0A

# @intent:responsibility 割り込み番号に応じてベクタ分岐またはsyscallを実行します。
def handle_interrupt(state: LittleCpuState, bus: Bus, vector: int) -> None:
    vector &= REGISTER_MASK
    if vector != SYS_INTERRUPT:
        entry = (INTERRUPT_TABLE_BASE + vector * 4) & ADDRESS_MASK
        handler = read_be(bus, entry, 4)
        push_pc_and_jump(state, bus, handler)
        return

    selector = state.read_register(REG_A0)
    syscall = SYSCALL_MAP.get(selector)
    if syscall is None:
        logger.debug("Ignoring unknown syscall selector %d at PC=%#06x", selector, state.pc)
        return
    syscall(state, bus)

# @intent:responsibility READ_CHAR: 入力を1文字待ち、その下位8ビットをV0へ格納します。
def syscall_read_char(state: LittleCpuState, bus: Bus) -> None:
    state.write_register(REG_V0, bus.read_io(CONSOLE_PORT) & 0xFF)

# @intent:responsibility READ_LINE: A1のバッファへ改行・EOF・(A2-1)バイトのいずれかまで読み込み、
#                       NUL終端した上で読み込んだバイト数をV0へ格納します。
def syscall_read_line(state: LittleCpuState, bus: Bus) -> None:
    address = state.read_register(REG_A1) & ADDRESS_MASK
    capacity = state.read_register(REG_A2)
    if capacity == 0:
        state.write_register(REG_V0, 0)
        return
    count = 0
    while count < capacity - 1:
        char = bus.read_io(CONSOLE_PORT)
        if char in (CONSOLE_EOF, NEWLINE):
            break
        bus.write((address + count) & ADDRESS_MASK, char)
        count += 1
    bus.write((address + count) & ADDRESS_MASK, 0)
    state.write_register(REG_V0, count)

def syscall_write_char(state: LittleCpuState, bus: Bus) -> None:
    bus.write_io(CONSOLE_PORT, state.read_register(REG_A1) & 0xFF)

def _write_string(state: LittleCpuState, bus: Bus) -> None:
    address = state.read_register(REG_A1) & ADDRESS_MASK
    for i in range(MEMORY_SIZE):
        char = bus.read((address + i) & ADDRESS_MASK)
        if char == 0:
            break
        bus.write_io(CONSOLE_PORT, char)

# @intent:responsibility WRITE_STRING: A1が指すNUL終端バイト列を出力します。
def syscall_write_string(state: LittleCpuState, bus: Bus) -> None:
    _write_string(state, bus)

def syscall_write_line(state: LittleCpuState, bus: Bus) -> None:
    _write_string(state, bus)
    bus.write_io(CONSOLE_PORT, NEWLINE)

# @intent:responsibility STRING_LENGTH / STRING_COMPARE: 予約済み。何もしません。
def syscall_reserved(state: LittleCpuState, bus: Bus) -> None:
    pass

# @intent:map syscallセレクタから実装へのマッピングテーブル。
SYSCALL_MAP: Dict[int, Callable[[LittleCpuState, Bus], None]] = {
    Syscall.STRING_LENGTH: syscall_reserved,
    Syscall.STRING_COMPARE: syscall_reserved,
    Syscall.READ_CHAR: syscall_read_char,
    Syscall.READ_LINE: syscall_read_line,
    Syscall.WRITE_CHAR: syscall_write_char,
    Syscall.WRITE_STRING: syscall_write_string,
    Syscall.WRITE_LINE: syscall_write_line,
}
