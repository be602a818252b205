# little_machine/arch/little/state.py
"""
Little Machine CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List

from little_machine.core.state import CpuState
from little_machine.arch.little.isa import (
    NUM_REGISTERS, REGISTER_MASK, ZERO_INDEX, SP_INDEX, FLAGS_INDEX, EQUAL_FLAG, GREATER_FLAG,
)

# @intent:responsibility 32本の32ビットレジスタ、PC、HALT状態を保持します。
@dataclass
class LittleCpuState(CpuState):
    """
    Little Machine のレジスタ状態を保持するデータクラス。
    PCは専用フィールド、SPとFLAGSは規約上のレジスタ番号(2, 31)を指すプロパティです。
    レジスタ0への書き込みは常に捨てられます。
    """
    registers: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)

    # @intent:accessor レジスタ0をゼロ固定として扱うアクセサ。
    def read_register(self, index: int) -> int:
        if index == ZERO_INDEX:
            return 0
        return self.registers[index]

    def write_register(self, index: int, value: int) -> None:
        if index == ZERO_INDEX:
            return
        self.registers[index] = value & REGISTER_MASK

    @property
    def sp(self) -> int:
        return self.registers[SP_INDEX]

    @sp.setter
    def sp(self, value: int) -> None:
        self.registers[SP_INDEX] = value & REGISTER_MASK

    @property
    def flags(self) -> int:
        return self.registers[FLAGS_INDEX]

    @flags.setter
    def flags(self, value: int) -> None:
        self.registers[FLAGS_INDEX] = value & REGISTER_MASK

    # @intent:accessor FLAGSレジスタの各ビットへのアクセス。
    @property
    def flag_eq(self) -> bool:
        return (self.flags & EQUAL_FLAG) != 0

    @property
    def flag_gt(self) -> bool:
        return (self.flags & GREATER_FLAG) != 0
