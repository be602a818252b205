# little_machine/arch/little/instructions/control.py
"""
制御命令（HLT、ジャンプ、条件ジャンプ、CALL/RET、INTERRUPT）の実装。

ジャンプ先はデスティネーションの「値」d であり、位置ではありません。
"""
from little_machine.transport.bus import Bus, ADDRESS_MASK
from little_machine.arch.little.decoder import Instruction
from little_machine.arch.little.isa import Opcode, EQUAL_FLAG, GREATER_FLAG
from little_machine.arch.little.state import LittleCpuState
from little_machine.arch.little.stack import push_pc_and_jump, pop_pc
from little_machine.arch.little.interrupts import handle_interrupt
from .base import Operands

_BOTH = EQUAL_FLAG | GREATER_FLAG

# @intent:map 条件ジャンプごとの、FLAGSに対する成立条件。
JUMP_PREDICATES = {
    Opcode.JE: lambda flags: bool(flags & EQUAL_FLAG),
    Opcode.JNE: lambda flags: not flags & EQUAL_FLAG,
    Opcode.JG: lambda flags: bool(flags & GREATER_FLAG),
    Opcode.JGE: lambda flags: bool(flags & _BOTH),
    Opcode.JL: lambda flags: not flags & _BOTH,
    Opcode.JLE: lambda flags: not flags & GREATER_FLAG,
}

# @intent:responsibility HLT: 実行状態を Halted へ遷移させます。
def execute_hlt(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    state.halted = True

def execute_j(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    state.pc = ops.d & ADDRESS_MASK

# @intent:responsibility JE/JNE/JG/JGE/JL/JLE: FLAGSが条件を満たす場合のみ PC := d
def execute_conditional_jump(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    if JUMP_PREDICATES[inst.opcode](state.flags):
        state.pc = ops.d & ADDRESS_MASK

# @intent:responsibility CALL: デコード後のPC（次の命令）をプッシュし、PC := d
def execute_call(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    push_pc_and_jump(state, bus, ops.d)

def execute_ret(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    pop_pc(state, bus)

def execute_interrupt(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    handle_interrupt(state, bus, ops.d)
