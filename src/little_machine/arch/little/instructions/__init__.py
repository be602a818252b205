# little_machine/arch/little/instructions/__init__.py
"""
Little Machine 命令セット実装パッケージ。
"""
from typing import Optional

from little_machine.transport.bus import Bus
from little_machine.core.snapshot import UnsupportedOpcode
from little_machine.arch.little.decoder import Instruction
from little_machine.arch.little.operands import resolve, read_location
from little_machine.arch.little.state import LittleCpuState
from .base import Operands
from .maps import EXECUTE_MAP

# @intent:responsibility ソース、デスティネーションの順にオペランドを解決し、値を読み込みます。
def resolve_operands(inst: Instruction, state: LittleCpuState, bus: Bus) -> Operands:
    """
    オペランドを持たない側は解決しません（PCも進みません）。
    """
    src = dst = None
    s = d = 0
    if inst.has_source:
        src = resolve(state, bus, inst.src_reg, inst.src_mode, inst.src_indirect, inst.width)
        s = read_location(state, bus, src, inst.width, inst.signed)
    if inst.has_destination:
        dst = resolve(state, bus, inst.dst_reg, inst.dst_mode, inst.dst_indirect, inst.width, destination=True)
        d = read_location(state, bus, dst, inst.width, inst.signed)
    return Operands(src, s, dst, d)

# @intent:responsibility デコードされた命令を実行します。
def execute_instruction(inst: Instruction, state: LittleCpuState, bus: Bus) -> Optional[UnsupportedOpcode]:
    """
    オペランドを解決してから実行関数を呼び出します。実行関数が無いオペコード
    （LEAおよび未割り当て）はオペランドを読み飛ばした上で UnsupportedOpcode を返し、
    実行は次の命令へ継続します。
    """
    operands = resolve_operands(inst, state, bus)
    executor = EXECUTE_MAP.get(inst.opcode)
    if executor is None:
        return UnsupportedOpcode(pc=inst.address, opcode=inst.opcode, mnemonic=inst.name)
    executor(state, bus, inst, operands)
    return None
