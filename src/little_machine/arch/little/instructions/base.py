# little_machine/arch/little/instructions/base.py
"""
命令実装用の共通ユーティリティ。
"""
from dataclasses import dataclass
from typing import Optional

from little_machine.transport.bus import Bus
from little_machine.arch.little.isa import REGISTER_MASK
from little_machine.arch.little.decoder import Instruction
from little_machine.arch.little.operands import Location, write_location
from little_machine.arch.little.state import LittleCpuState

# @intent:data_structure 解決済みのオペランド。位置(src/dst)と、実行前に読み込んだ値(s/d)。
@dataclass(frozen=True)
class Operands:
    src: Optional[Location] = None
    s: int = 0
    dst: Optional[Location] = None
    d: int = 0

# @intent:utility_function 結果をデスティネーションへ宣言幅で書き込みます。
def store_result(state: LittleCpuState, bus: Bus, inst: Instruction, ops: Operands, value: int) -> None:
    write_location(state, bus, ops.dst, inst.width, value & REGISTER_MASK)
