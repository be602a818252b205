# tests/core/test_cpu.py
"""
little_machine.core.cpuモジュールの単体テスト。
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pytest

from little_machine.core.state import CpuState
from little_machine.core.cpu import AbstractCpu
from little_machine.core.snapshot import Operation, UnsupportedOpcode
from little_machine.transport.bus import Bus, RAM, BusAccessType
from little_machine.common.types import RegisterLayoutInfo, RegisterInfo

# @intent:test_suite CPUの状態管理と抽象CPUの命令サイクル（テンプレートメソッド）を検証します。

@dataclass
class CounterState(CpuState):
    acc: int = 0

class StubCpu(AbstractCpu):
    """
    1バイト命令のテスト用CPU。
    0x00: NOP / 0x01: acc += 1 とメモリ0x20へ書き込み / 0x02: HALT / その他: 未サポート
    """
    @property
    def has_io_port(self) -> bool:
        return False

    def _create_initial_state(self) -> CounterState:
        return CounterState()

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    def _decode(self, opcode: int) -> Operation:
        names = {0x00: "NOP", 0x01: "INC", 0x02: "HALT"}
        return Operation(opcode_hex=f"{opcode:02X}", mnemonic=names.get(opcode, "UNKNOWN"),
                         length=1, instruction=opcode)

    def _execute(self, operation: Operation) -> Optional[UnsupportedOpcode]:
        if operation.instruction == 0x01:
            self._state.acc += 1
            self._bus.write(0x0020, self._state.acc)
        elif operation.instruction == 0x02:
            self._state.halted = True
        elif operation.instruction != 0x00:
            return UnsupportedOpcode(self._state.pc - 1, operation.instruction, "UNKNOWN")
        return None

    def get_register_map(self) -> Dict[str, int]:
        return {"PC": self._state.pc, "ACC": self._state.acc}

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [RegisterLayoutInfo("Test Group", [RegisterInfo("PC", 16), RegisterInfo("ACC", 8)])]

    def get_flag_state(self) -> Dict[str, bool]:
        return {}

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return []

@pytest.fixture
def stub():
    bus = Bus()
    bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
    return StubCpu(bus), bus

class TestCpuState:
    def test_cpu_state_init_default(self):
        state = CpuState()
        assert state.pc == 0x0000
        assert state.halted is False

    # @intent:test_case_copy copy()は共有されない複製を返すことを検証します。
    def test_copy_is_independent(self):
        state = CounterState(pc=0x10, acc=3)
        clone = state.copy()
        clone.acc = 99
        assert state.acc == 3
        assert clone.pc == 0x10

class TestAbstractCpu:
    # @intent:test_case_step step()はPCを進め、実行後の状態とバスアクティビティを含むSnapshotを返します。
    def test_step_produces_snapshot(self, stub):
        cpu, bus = stub
        bus.load(0x0000, 0x01)

        snapshot = cpu.step()

        assert snapshot.state.pc == 0x0001
        assert snapshot.state.acc == 1
        assert snapshot.operation.mnemonic == "INC"
        assert snapshot.metadata.instruction_count == 1
        assert snapshot.metadata.symbol_info == "0000: INC"
        kinds = [access.access_type for access in snapshot.bus_activity]
        assert kinds == [BusAccessType.READ, BusAccessType.WRITE]

    def test_snapshot_state_is_not_live(self, stub):
        cpu, bus = stub
        bus.load(0x0000, 0x01)
        bus.load(0x0001, 0x01)
        first = cpu.step()
        cpu.step()
        assert first.state.acc == 1
        assert cpu.get_state().acc == 2

    # @intent:test_case_halt HALT後の step() は状態を変えずに HALTED のSnapshotを返します。
    def test_halted_step_is_inert(self, stub):
        cpu, bus = stub
        bus.load(0x0000, 0x02)
        cpu.step()
        assert cpu.is_halted()

        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "HALTED"
        assert snapshot.state.pc == 0x0001
        assert snapshot.bus_activity == []
        assert cpu.get_instruction_count() == 1

    def test_unsupported_event_is_logged_and_attached(self, stub, caplog):
        cpu, bus = stub
        bus.load(0x0000, 0x7F)
        with caplog.at_level(logging.WARNING, logger="little_machine.core.cpu"):
            snapshot = cpu.step()
        assert snapshot.event == UnsupportedOpcode(0x0000, 0x7F, "UNKNOWN")
        assert "Unsupported instruction" in caplog.text
        assert not cpu.is_halted()

    def test_run_until_halt(self, stub):
        cpu, bus = stub
        for i, opcode in enumerate([0x01, 0x00, 0x01, 0x02]):
            bus.load(i, opcode)
        assert cpu.run() == 4
        assert cpu.get_state().acc == 2
        assert cpu.is_halted()

    def test_run_respects_max_steps(self, stub):
        cpu, _ = stub
        # メモリは全てNOP
        assert cpu.run(max_steps=10) == 10
        assert cpu.get_state().pc == 10
        assert not cpu.is_halted()

    # @intent:test_case_reset reset()とrestore_state()による状態の入れ替えを検証します。
    def test_reset_and_restore(self, stub):
        cpu, bus = stub
        bus.load(0x0000, 0x01)
        saved = cpu.get_state().copy()
        cpu.step()

        cpu.restore_state(saved)
        assert cpu.get_state().pc == 0 and cpu.get_state().acc == 0
        saved.acc = 42
        assert cpu.get_state().acc == 0

        cpu.step()
        cpu.reset()
        assert cpu.get_state() == CounterState()
        assert cpu.get_instruction_count() == 0
