# little_machine/arch/little/instructions/load.py
"""
転送命令（MOV, XCHG）とスタック命令（PUSH, POP）の実装。
"""
from little_machine.transport.bus import Bus
from little_machine.arch.little.decoder import Instruction
from little_machine.arch.little.operands import size_mask, write_location
from little_machine.arch.little.state import LittleCpuState
from little_machine.arch.little.stack import push_value, pop_value
from .base import Operands, store_result

# @intent:responsibility MOV: D := s
def execute_mov(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s)

# @intent:responsibility XCHG: D := s の後、ソース位置 := d
def execute_xchg(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s)
    write_location(state, bus, ops.src, inst.width, ops.d)

# @intent:responsibility PUSH: Memory[SP] := s（宣言幅）、SP += width/8
def execute_push(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    push_value(state, bus, ops.s & size_mask(inst.width), inst.width // 8)

# @intent:responsibility POP: SP -= width/8、D := Memory[SP]（宣言幅）
# 書き込みは宣言幅だけなので、符号フラグは結果に影響しない
def execute_pop(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, pop_value(state, bus, inst.width // 8))
