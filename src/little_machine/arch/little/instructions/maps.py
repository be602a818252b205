# little_machine/arch/little/instructions/maps.py
"""
オペコードと命令実装のマッピング定義。
"""
from little_machine.arch.little.isa import Opcode
from . import load
from . import alu
from . import control

# @intent:map オペコードから実行関数へのマッピングテーブル。
# LEAは予約済みで未実装のため、意図的に登録していません。
EXECUTE_MAP = {
    # Load/Stack
    Opcode.MOV: load.execute_mov,
    Opcode.XCHG: load.execute_xchg,
    Opcode.PUSH: load.execute_push,
    Opcode.POP: load.execute_pop,

    # ALU
    Opcode.ADD: alu.execute_add,
    Opcode.SUB: alu.execute_sub,
    Opcode.MUL: alu.execute_mul,
    Opcode.DIV: alu.execute_div,
    Opcode.MOD: alu.execute_mod,
    Opcode.SHL: alu.execute_shl,
    Opcode.SHR: alu.execute_shr,
    Opcode.AND: alu.execute_and,
    Opcode.OR: alu.execute_or,
    Opcode.XOR: alu.execute_xor,
    Opcode.NAND: alu.execute_nand,
    Opcode.NOR: alu.execute_nor,
    Opcode.XNOR: alu.execute_xnor,
    Opcode.NOT: alu.execute_not,
    Opcode.CMP: alu.execute_cmp,

    # Control
    Opcode.HLT: control.execute_hlt,
    Opcode.J: control.execute_j,
    Opcode.JE: control.execute_conditional_jump,
    Opcode.JNE: control.execute_conditional_jump,
    Opcode.JG: control.execute_conditional_jump,
    Opcode.JGE: control.execute_conditional_jump,
    Opcode.JL: control.execute_conditional_jump,
    Opcode.JLE: control.execute_conditional_jump,
    Opcode.CALL: control.execute_call,
    Opcode.RET: control.execute_ret,
    Opcode.INTERRUPT: control.execute_interrupt,
}
