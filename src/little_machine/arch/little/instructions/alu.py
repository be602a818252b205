# little_machine/arch/little/instructions/alu.py
"""
算術論理演算命令と比較命令の実装。

演算は D := s op d の形（ソースが左辺）で、値は32ビット表現のまま計算し、
書き込み時に宣言幅へ切り詰めます。FLAGSを変更するのはCMPだけです。
"""
from little_machine.core.errors import DivideByZero
from little_machine.transport.bus import Bus
from little_machine.arch.little.decoder import Instruction
from little_machine.arch.little.isa import REGISTER_MASK, EQUAL_FLAG, GREATER_FLAG
from little_machine.arch.little.operands import to_signed
from little_machine.arch.little.state import LittleCpuState
from .base import Operands, store_result

def execute_add(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s + ops.d)

def execute_sub(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s - ops.d)

def execute_mul(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s * ops.d)

# @intent:utility_function 符号付き/なしの除算。符号付きは0方向への切り捨てで、剰余は被除数の符号に従います。
def _divide(inst: Instruction, s: int, d: int):
    if d == 0:
        raise DivideByZero(inst.address, inst.opcode)
    if not inst.signed:
        return s // d, s % d
    a, b = to_signed(s), to_signed(d)
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient, a - b * quotient

def execute_div(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    quotient, _ = _divide(inst, ops.s, ops.d)
    store_result(state, bus, inst, ops, quotient)

def execute_mod(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    _, remainder = _divide(inst, ops.s, ops.d)
    store_result(state, bus, inst, ops, remainder)

# @intent:responsibility SHL: D := s << d。シフト量が32以上なら全ビットが押し出されます。
def execute_shl(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    amount = ops.d & REGISTER_MASK
    result = 0 if amount >= 32 else ops.s << amount
    store_result(state, bus, inst, ops, result)

# @intent:responsibility SHR: D := s >> d。符号付きは算術シフト、符号なしは論理シフトです。
def execute_shr(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    amount = min(ops.d & REGISTER_MASK, 32)
    if inst.signed:
        result = to_signed(ops.s) >> amount
    else:
        result = (ops.s & REGISTER_MASK) >> amount
    store_result(state, bus, inst, ops, result)

def execute_and(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s & ops.d)

def execute_or(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s | ops.d)

def execute_xor(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ops.s ^ ops.d)

def execute_nand(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ~(ops.s & ops.d))

def execute_nor(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ~(ops.s | ops.d))

def execute_xnor(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ~(ops.s ^ ops.d))

# @intent:responsibility NOT: D := ~d（デスティネーションのみの単項演算）
def execute_not(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    store_result(state, bus, inst, ops, ~ops.d)

# @intent:responsibility CMP: 32ビット符号なしとして s と d を比較し、FLAGSを設定します。Dは変更しません。
def execute_cmp(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands) -> None:
    s = ops.s & REGISTER_MASK
    d = ops.d & REGISTER_MASK
    flags = 0
    if s == d:
        flags |= EQUAL_FLAG
    if s > d:
        flags |= GREATER_FLAG
    state.flags = flags
