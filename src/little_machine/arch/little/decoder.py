# little_machine/arch/little/decoder.py
"""
命令デコーダ。

PCが指す3バイトの命令語（ビッグエンディアン24ビット）を読み込み、
各フィールドを取り出して Instruction を生成します。

ビット配置:
    23..19 opcode / 18..17 src mode / 16..15 dst mode / 14..10 src reg /
    9..5 dst reg / 4..3 size / 2 signed / 1 src indirect / 0 dst indirect
"""
from dataclasses import dataclass
from typing import Tuple

from little_machine.core.errors import DecodeError
from little_machine.transport.bus import Bus, ADDRESS_MASK, read_be
from little_machine.arch.little.isa import (
    INSTRUCTION_SIZE, AddressingMode, OperandSize, Opcode,
    WRITES_BACK, WRITES_SOURCE, has_source, has_destination, opcode_name,
)

# @intent:responsibility デコード済みの1命令を表します（メモリには格納されない一時的な値）。
@dataclass(frozen=True)
class Instruction:
    address: int # 命令語をフェッチしたアドレス
    word: int
    opcode: int
    src_mode: AddressingMode
    dst_mode: AddressingMode
    src_reg: int
    dst_reg: int
    size: OperandSize
    signed: bool
    src_indirect: bool
    dst_indirect: bool

    @property
    def width(self) -> int:
        return self.size.bits

    @property
    def name(self) -> str:
        return opcode_name(self.opcode)

    @property
    def has_source(self) -> bool:
        return has_source(self.opcode)

    @property
    def has_destination(self) -> bool:
        return has_destination(self.opcode)

# @intent:responsibility PCから3バイトを読み、24ビットの命令語を返します。
def fetch_word(bus: Bus, pc: int) -> int:
    return read_be(bus, pc, INSTRUCTION_SIZE)

def _mode(value: int, pc: int, opcode: int, operand: str) -> AddressingMode:
    try:
        return AddressingMode(value)
    except ValueError:
        raise DecodeError(f"Invalid {operand} addressing mode {value}", pc, opcode) from None

# 使われないオペランドのモードは検証しない
def _unused_mode(value: int) -> AddressingMode:
    return AddressingMode(value) if value != 3 else AddressingMode.REGISTER

# @intent:responsibility 命令語をフィールドに分解し、検証した上で Instruction を返します。
# @intent:pre-condition word は24ビット値です。
def decode_word(word: int, pc: int) -> Instruction:
    """
    以下の場合に DecodeError を送出します:
    - サイズコードが予約値(3)
    - 使用されるオペランドのモードコードが3
    - 書き戻す命令のデスティネーション（XCHGではソースも）が即値
    """
    opcode = (word >> 19) & 0x1F
    src_bits = (word >> 17) & 0x03
    dst_bits = (word >> 15) & 0x03
    size_code = (word >> 3) & 0x03

    if size_code == 3:
        raise DecodeError("Reserved operand size code 3", pc, opcode)

    src_mode = _mode(src_bits, pc, opcode, "source") if has_source(opcode) else _unused_mode(src_bits)
    dst_mode = _mode(dst_bits, pc, opcode, "destination") if has_destination(opcode) else _unused_mode(dst_bits)

    if has_destination(opcode) and opcode in WRITES_BACK and dst_mode == AddressingMode.IMMEDIATE:
        raise DecodeError("Instruction cannot have an immediate destination", pc, opcode)
    if opcode in WRITES_SOURCE and src_mode == AddressingMode.IMMEDIATE:
        raise DecodeError("Instruction cannot write back to an immediate source", pc, opcode)

    return Instruction(
        address=pc,
        word=word,
        opcode=opcode,
        src_mode=src_mode,
        dst_mode=dst_mode,
        src_reg=(word >> 10) & 0x1F,
        dst_reg=(word >> 5) & 0x1F,
        size=OperandSize(size_code),
        signed=bool(word & 0x04),
        src_indirect=bool(word & 0x02),
        dst_indirect=bool(word & 0x01),
    )

def decode(bus: Bus, pc: int) -> Tuple[Instruction, int]:
    """
    PCの命令をデコードし、(Instruction, 命令語直後のPC) を返します。
    オペランドの解決によって、PCはこの後さらに進むことがあります。
    """
    instruction = decode_word(fetch_word(bus, pc), pc)
    return instruction, (pc + INSTRUCTION_SIZE) & ADDRESS_MASK

# @intent:utility_function フィールドから命令語の3バイトを組み立てます（decode_word の逆変換）。
def encode(opcode: int, src_mode: int = AddressingMode.REGISTER, dst_mode: int = AddressingMode.REGISTER,
           src_reg: int = 0, dst_reg: int = 0, size: int = OperandSize.DWORD, signed: bool = False,
           src_indirect: bool = False, dst_indirect: bool = False) -> bytes:
    word = ((opcode & 0x1F) << 19) \
        | ((src_mode & 0x03) << 17) \
        | ((dst_mode & 0x03) << 15) \
        | ((src_reg & 0x1F) << 10) \
        | ((dst_reg & 0x1F) << 5) \
        | ((size & 0x03) << 3) \
        | (int(signed) << 2) \
        | (int(src_indirect) << 1) \
        | int(dst_indirect)
    return word.to_bytes(INSTRUCTION_SIZE, "big")

__all__ = ["Instruction", "Opcode", "decode", "decode_word", "encode", "fetch_word"]
