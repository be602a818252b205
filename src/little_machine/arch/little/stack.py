# little_machine/arch/little/stack.py
"""
スタックとサブルーチン呼び出しの共通処理。

SPはメモリへのバイトオフセットで、プッシュ/CALLで増加（上方向に伸長）します。
PUSH/POPは命令の宣言幅、CALL/RET/割り込みは常に4バイト（32ビットのPC）単位で動きます。
"""
from little_machine.transport.bus import Bus, ADDRESS_MASK, read_be, write_be
from little_machine.arch.little.state import LittleCpuState

# @intent:constant CALL/RETが退避・復帰するPCのバイト数。
RETURN_ADDRESS_SIZE = 4

# @intent:responsibility Memory[SP] に n バイトの値を書き込み、SPを n 進めます。
def push_value(state: LittleCpuState, bus: Bus, value: int, n: int) -> None:
    write_be(bus, state.sp & ADDRESS_MASK, n, value)
    state.sp = state.sp + n

# @intent:responsibility SPを n 戻し、Memory[SP] から n バイトの値を読み込みます。
def pop_value(state: LittleCpuState, bus: Bus, n: int) -> int:
    state.sp = state.sp - n
    return read_be(bus, state.sp & ADDRESS_MASK, n)

# @intent:responsibility 現在のPC（戻り先）をプッシュしてから target へジャンプします。
def push_pc_and_jump(state: LittleCpuState, bus: Bus, target: int) -> None:
    push_value(state, bus, state.pc, RETURN_ADDRESS_SIZE)
    state.pc = target & ADDRESS_MASK

def pop_pc(state: LittleCpuState, bus: Bus) -> None:
    state.pc = pop_value(state, bus, RETURN_ADDRESS_SIZE) & ADDRESS_MASK
