# little_machine/arch/little/cpu.py
"""
Little Machine CPUエミュレーションの中心モジュール。

このモジュールは32ビットレジスタマシンの具体的な実装を提供し、
AbstractCpuインターフェースを実装します。
"""
from typing import Dict, List, Optional, Tuple

from little_machine.core.cpu import AbstractCpu
from little_machine.core.snapshot import Operation, UnsupportedOpcode
from little_machine.transport.bus import Bus, ADDRESS_MASK
from little_machine.common.types import RegisterLayoutInfo, RegisterInfo
from little_machine.arch.little.state import LittleCpuState
from little_machine.arch.little.isa import INSTRUCTION_SIZE, REGISTER_NAMES, register_index
from little_machine.arch.little.decoder import fetch_word, decode_word
from little_machine.arch.little.instructions import execute_instruction
from little_machine.arch.little import disassembler

# @intent:responsibility Little Machine CPUの具体的なエミュレーションロジックを提供します。
class LittleCpu(AbstractCpu):
    """
    Little Machine をエミュレートするクラス。
    PCは命令語の直後まで進めてから実行し、オペランドの解決に応じてさらに進みます。
    """
    def __init__(self, bus: Bus):
        super().__init__(bus)

    # @intent:responsibility コンソールはI/Oポート0に接続されます。
    @property
    def has_io_port(self) -> bool:
        return True

    # @intent:responsibility 全レジスタ0、PC=0、実行中の状態を生成します。
    def _create_initial_state(self) -> LittleCpuState:
        return LittleCpuState()

    def _fetch(self) -> int:
        return fetch_word(self._bus, self._state.pc)

    # @intent:rationale 実際のデコードは decoder に、表示情報の組み立ては disassembler に委譲します。
    def _decode(self, word: int) -> Operation:
        instruction = decode_word(word, self._state.pc)
        return disassembler.describe(self._bus, instruction)

    # @intent:responsibility 命令語の長さだけPCを進めます。オペランドのバイトは解決時に消費されます。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + INSTRUCTION_SIZE) & ADDRESS_MASK

    def _execute(self, operation: Operation) -> Optional[UnsupportedOpcode]:
        return execute_instruction(operation.instruction, self._state, self._bus)

    # @intent:responsibility 外部（ローダー・デバッガ・設定）からレジスタを設定します。
    def set_register(self, name, value: int) -> None:
        self._state.write_register(register_index(name), value)

    def set_pc(self, value: int) -> None:
        self._state.pc = value & ADDRESS_MASK

    def get_registers(self) -> List[int]:
        return list(self._state.registers)

    # @intent:responsibility ログを残さずにメモリの1バイトを読みます（インスペクタ用）。
    def read_memory(self, address: int) -> int:
        return self._bus.peek(address & ADDRESS_MASK)

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        register_map = {"PC": s.pc}
        for index, name in enumerate(REGISTER_NAMES):
            register_map[name.upper()] = s.read_register(index)
        return register_map

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        def group(names):
            return [RegisterInfo(name.upper(), 32) for name in names]
        return [
            RegisterLayoutInfo("Control", [RegisterInfo("PC", 16)] + group(["sp", "flags"])),
            RegisterLayoutInfo("Reserved", group(["zero", "at", "k0", "k1"])),
            RegisterLayoutInfo("Values & Arguments", group(REGISTER_NAMES[3:9])),
            RegisterLayoutInfo("Temporaries", group(REGISTER_NAMES[9:19])),
            RegisterLayoutInfo("Saved", group(REGISTER_NAMES[19:29])),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        return {
            "EQ": self._state.flag_eq,
            "GT": self._state.flag_gt,
        }

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
