# tests/arch/little/test_disassembler.py
"""
little_machine.arch.little.disassemblerモジュールのテスト。
"""
from little_machine.arch.little.decoder import encode, decode_word
from little_machine.arch.little.disassembler import describe, disassemble, format_mnemonic
from little_machine.arch.little.isa import Opcode, AddressingMode as M, OperandSize as S, register_index as r

def imm(value: int, n: int = 4) -> bytes:
    return value.to_bytes(n, "big")

# @intent:test_suite 逆アセンブル結果の書式と、バスを汚さないことを検証します。
class TestDescribe:
    def test_describe_mov(self, machine):
        machine.load(encode(Opcode.MOV, M.IMMEDIATE, M.REGISTER, 0, r("t0")), imm(0x12345678))
        operation = describe(machine.bus, decode_word(0x540130, 0))
        assert operation.opcode_hex == "540130"
        assert operation.mnemonic == "MOV.D"
        assert operation.operands == ["#0x12345678", "t0"]
        assert operation.operand_bytes == [0x12, 0x34, 0x56, 0x78]
        assert operation.length == 7

    def test_mnemonic_suffixes(self):
        assert format_mnemonic(decode_word(int.from_bytes(encode(Opcode.ADD, size=S.BYTE, signed=True), "big"), 0)) == "ADD.SB"
        assert format_mnemonic(decode_word(int.from_bytes(encode(Opcode.SUB, size=S.WORD), "big"), 0)) == "SUB.W"
        assert format_mnemonic(decode_word(int.from_bytes(encode(Opcode.HLT), "big"), 0)) == "HLT"
        assert format_mnemonic(decode_word(int.from_bytes(encode(Opcode.RET), "big"), 0)) == "RET"

class TestDisassemble:
    def test_listing(self, machine):
        machine.load(
            encode(Opcode.MOV, M.IMMEDIATE, M.REGISTER, 0, r("a1"), S.BYTE), imm(0x41, 1),
            encode(Opcode.PUSH, M.IMMEDIATE, size=S.WORD), imm(0x0041, 2),
            encode(Opcode.MOV, M.ABSOLUTE, M.REGISTER, 0, r("v0"), src_indirect=True), imm(0x2000),
            encode(Opcode.INTERRUPT, dst_mode=M.IMMEDIATE), imm(0),
            encode(Opcode.HLT),
        )
        listing = disassemble(machine.bus, 0x0000, 26)
        assert [line[0] for line in listing] == [0x0000, 0x0004, 0x0009, 0x0010, 0x0017]
        assert listing[0][2] == "MOV.B #0x41, a1"
        assert listing[1][2] == "PUSH.W #0x0041"
        assert listing[2][2] == "MOV.D *[0x2000], v0"
        assert listing[3][2] == "INTERRUPT.D #0x00000000"
        assert listing[4][2] == "HLT"
        assert listing[0][1] == "54 00 C0 41"

    def test_undecodable_word_is_shown_as_data(self, machine):
        machine.load(encode(Opcode.MOV, size=3), encode(Opcode.HLT))
        listing = disassemble(machine.bus, 0x0000, 6)
        assert listing[0] == (0x0000, "50 00 18", "DB 0x500018")
        assert listing[1][0] == 0x0003

    def test_does_not_touch_bus_log(self, machine):
        machine.load(encode(Opcode.ADD, M.IMMEDIATE, M.REGISTER, 0, r("t0")), imm(1))
        disassemble(machine.bus, 0x0000, 7)
        assert machine.bus.get_and_clear_activity_log() == []
        assert machine.state.pc == 0
