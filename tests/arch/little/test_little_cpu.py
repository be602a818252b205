# tests/arch/little/test_little_cpu.py
"""
LittleCpu の命令サイクルと、インスペクタ向けインターフェースのテスト。
"""
import logging

import pytest

from little_machine.core.errors import DecodeError, MachineError
from little_machine.transport.bus import BusAccessType
from little_machine.arch.little.decoder import encode
from little_machine.arch.little.isa import Opcode, AddressingMode as M, OperandSize as S, register_index as r

def imm(value: int, n: int = 4) -> bytes:
    return (value & ((1 << (8 * n)) - 1)).to_bytes(n, "big")

def ins(opcode, src=M.REGISTER, dst=M.REGISTER, rs="zero", rd="zero", size=S.DWORD) -> bytes:
    return encode(opcode, src, dst, r(rs), r(rd), size)

HLT = ins(Opcode.HLT)

class TestInitialState:
    def test_reset_state(self, machine):
        assert machine.state.pc == 0
        assert machine.cpu.get_registers() == [0] * 32
        assert not machine.cpu.is_halted()
        assert machine.cpu.get_instruction_count() == 0

    def test_set_register_by_name(self, machine):
        machine.cpu.set_register("A0", 0x1_0000_0005)
        assert machine.reg("a0") == 0x00000005
        machine.cpu.set_register("zero", 7)
        assert machine.reg(0) == 0

    def test_set_pc_masks_to_address_space(self, machine):
        machine.cpu.set_pc(0x12345)
        assert machine.state.pc == 0x2345

    def test_unknown_register_name(self, machine):
        with pytest.raises(ValueError):
            machine.cpu.set_register("r99", 1)

class TestStep:
    # @intent:test_case_snapshot Snapshotは実行直後の状態の複製で、以降の実行で変化しません。
    def test_step_returns_snapshot(self, machine):
        machine.load(ins(Opcode.MOV, M.IMMEDIATE, rd="t0"), imm(5), ins(Opcode.ADD, M.IMMEDIATE, rd="t0"), imm(1), HLT)
        first = machine.cpu.step()
        assert first.metadata.symbol_info == "0000: MOV.D #0x00000005, t0"
        assert first.metadata.instruction_count == 1
        assert first.operation.mnemonic == "MOV.D"
        assert first.state.pc == 7

        machine.cpu.step()
        assert first.state.read_register(r("t0")) == 5
        assert machine.reg("t0") == 6

    def test_fetch_and_operands_are_logged(self, machine):
        machine.load(ins(Opcode.MOV, M.IMMEDIATE, rd="t0"), imm(0x41))
        snapshot = machine.cpu.step()
        reads = [a.address for a in snapshot.bus_activity if a.access_type == BusAccessType.READ]
        assert reads == list(range(7))

    def test_write_is_logged_with_previous_value(self, machine):
        machine.bus.load(0x4000, 0xAB)
        machine.load(ins(Opcode.MOV, M.IMMEDIATE, M.ABSOLUTE, size=S.BYTE), imm(0x12, 1), imm(0x4000))
        snapshot = machine.cpu.step()
        writes = [a for a in snapshot.bus_activity if a.access_type == BusAccessType.WRITE]
        assert len(writes) == 1
        assert writes[0].address == 0x4000
        assert writes[0].data == 0x12
        assert writes[0].previous_data == 0xAB

    def test_step_while_halted_does_nothing(self, machine):
        machine.load(HLT)
        machine.cpu.step()
        snapshot = machine.cpu.step()
        assert snapshot.operation.mnemonic == "HALTED"
        assert machine.state.pc == 3
        assert machine.cpu.get_instruction_count() == 1

    def test_run_with_max_steps(self, machine):
        machine.load(ins(Opcode.J, dst=M.IMMEDIATE), imm(0))
        assert machine.cpu.run(max_steps=5) == 5
        assert not machine.cpu.is_halted()

    def test_pc_wraps_around(self, machine):
        machine.cpu.set_pc(0xFFFE)
        machine.load(bytes([0x00, 0x00]), address=0xFFFE)
        machine.load(bytes([0x00]), address=0x0000)
        machine.cpu.step()
        assert machine.cpu.is_halted()
        assert machine.state.pc == 0x0001

    def test_trace_logging(self, machine, caplog):
        machine.load(ins(Opcode.ADD, M.IMMEDIATE, rd="v0"), imm(2), HLT)
        with caplog.at_level(logging.DEBUG, logger="little_machine.core.cpu"):
            machine.cpu.run()
        assert "0000: ADD.D #0x00000002, v0" in caplog.text
        assert "0007: HLT" in caplog.text

class TestFatalErrors:
    def test_reserved_size_code(self, machine):
        machine.load(encode(Opcode.MOV, size=3))
        with pytest.raises(DecodeError) as excinfo:
            machine.cpu.step()
        assert excinfo.value.pc == 0
        assert excinfo.value.opcode == Opcode.MOV

    def test_decode_error_is_machine_error(self, machine):
        machine.load(HLT, ins(Opcode.ADD, M.REGISTER, M.IMMEDIATE))
        machine.cpu.set_pc(3)
        with pytest.raises(MachineError) as excinfo:
            machine.cpu.step()
        assert "PC=0x0003" in str(excinfo.value)

class TestInspection:
    def test_register_map(self, machine):
        machine.cpu.set_register("sp", 0x8000)
        machine.cpu.set_register("flags", 3)
        register_map = machine.cpu.get_register_map()
        assert list(register_map)[:4] == ["PC", "ZERO", "AT", "SP"]
        assert register_map["SP"] == 0x8000
        assert register_map["FLAGS"] == 3
        assert len(register_map) == 33

    def test_flag_state(self, machine):
        machine.cpu.set_register("flags", 0b10)
        assert machine.cpu.get_flag_state() == {"EQ": False, "GT": True}

    def test_register_layout_covers_all_registers(self, machine):
        names = [reg.name for group in machine.cpu.get_register_layout() for reg in group.registers]
        assert sorted(names) == sorted(machine.cpu.get_register_map())

    def test_read_memory_does_not_log(self, machine):
        machine.bus.load(0x1234, 0x5A)
        assert machine.cpu.read_memory(0x1234) == 0x5A
        assert machine.bus.get_and_clear_activity_log() == []
