# tests/core/test_snapshot.py
"""
little_machine.core.snapshotとerrorsモジュールの単体テスト。
"""
import dataclasses

import pytest

from little_machine.core.state import CpuState
from little_machine.core.snapshot import Operation, Metadata, Snapshot, UnsupportedOpcode, BusAccess, BusAccessType
from little_machine.core.errors import MachineError, DecodeError, DivideByZero

# @intent:test_suite スナップショット関連のデータ構造の不変性と、エラーのコンテキスト情報を検証します。

class TestSnapshot:
    def test_operation_defaults(self):
        op = Operation(opcode_hex="000000", mnemonic="HLT")
        assert op.operands == []
        assert op.operand_bytes == []
        assert op.length == 3
        assert op.instruction is None

    # @intent:test_case_immutable frozen データクラスは変更できないことを検証します。
    def test_snapshot_is_frozen(self):
        snapshot = Snapshot(
            state=CpuState(pc=0x0003),
            operation=Operation(opcode_hex="000000", mnemonic="HLT"),
            metadata=Metadata(instruction_count=1, symbol_info="0000: HLT"),
            bus_activity=[BusAccess(0x0000, 0x00, BusAccessType.READ)],
        )
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.operation = None
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.metadata.instruction_count = 2
        assert snapshot.event is None

    def test_unsupported_opcode_is_value(self):
        assert UnsupportedOpcode(0x10, 0x1E, "LEA") == UnsupportedOpcode(0x10, 0x1E, "LEA")

class TestErrors:
    def test_decode_error_carries_context(self):
        error = DecodeError("Reserved operand size code 3", 0x0123, 0x0A)
        assert isinstance(error, MachineError)
        assert error.pc == 0x0123
        assert error.opcode == 0x0A
        assert error.reason == "Reserved operand size code 3"
        assert str(error) == "Reserved operand size code 3 (PC=0x0123, opcode=0x0a)"

    def test_divide_by_zero_message(self):
        error = DivideByZero(0x0006, 0x06)
        assert error.reason == "Division by zero"
        assert "PC=0x0006" in str(error)
