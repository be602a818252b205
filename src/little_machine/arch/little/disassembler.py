# little_machine/arch/little/disassembler.py
"""
Little Machine 逆アセンブラ。

バスを peek で読むため、アクティビティログやCPUの状態には影響しません。
"""
from typing import List, Optional, Tuple

from little_machine.core.errors import DecodeError
from little_machine.core.snapshot import Operation
from little_machine.transport.bus import Bus, ADDRESS_MASK, peek_be
from little_machine.arch.little.decoder import Instruction, decode_word
from little_machine.arch.little.isa import (
    INSTRUCTION_SIZE, REGISTER_NAMES, AddressingMode, Opcode,
)

# サイズ接尾辞を持たない命令
_NO_SUFFIX = frozenset({Opcode.HLT, Opcode.RET})

def format_mnemonic(instruction: Instruction) -> str:
    if instruction.opcode in _NO_SUFFIX:
        return instruction.name
    sign = "S" if instruction.signed else ""
    return f"{instruction.name}.{sign}{instruction.size.suffix}"

# @intent:responsibility 1つのオペランドを文字列化し、(テキスト, オペランドバイト列) を返します。
def _format_operand(bus: Bus, address: int, reg: int, mode: AddressingMode,
                    indirect: bool, width: int) -> Tuple[str, List[int]]:
    prefix = "*" if indirect else ""
    if mode == AddressingMode.REGISTER:
        return f"{prefix}{REGISTER_NAMES[reg]}", []
    if mode == AddressingMode.IMMEDIATE:
        n = width // 8
        value = peek_be(bus, address, n)
        return f"{prefix}#0x{value:0{n * 2}X}", _peek_bytes(bus, address, n)
    pointer = peek_be(bus, address, 4) & ADDRESS_MASK
    return f"{prefix}[0x{pointer:04X}]", _peek_bytes(bus, address, 4)

def _peek_bytes(bus: Bus, address: int, n: int) -> List[int]:
    return [bus.peek((address + i) & ADDRESS_MASK) for i in range(n)]

# @intent:responsibility デコード済み命令から表示用の Operation を組み立てます。
def describe(bus: Bus, instruction: Instruction) -> Operation:
    """
    オペランドは実行時と同じ順序（ソース、デスティネーション）で命令語の直後から読みます。
    """
    address = (instruction.address + INSTRUCTION_SIZE) & ADDRESS_MASK
    operands: List[str] = []
    operand_bytes: List[int] = []
    if instruction.has_source:
        text, raw = _format_operand(bus, address, instruction.src_reg, instruction.src_mode,
                                    instruction.src_indirect, instruction.width)
        operands.append(text)
        operand_bytes.extend(raw)
        address = (address + len(raw)) & ADDRESS_MASK
    if instruction.has_destination:
        text, raw = _format_operand(bus, address, instruction.dst_reg, instruction.dst_mode,
                                    instruction.dst_indirect, instruction.width)
        operands.append(text)
        operand_bytes.extend(raw)

    return Operation(
        opcode_hex=f"{instruction.word:06X}",
        mnemonic=format_mnemonic(instruction),
        operands=operands,
        operand_bytes=operand_bytes,
        length=INSTRUCTION_SIZE + len(operand_bytes),
        instruction=instruction,
    )

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルする。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリを解析し、(アドレス, HEX, ニーモニック) のリストを返す。
    デコードできない命令語は "DB" として3バイト分を出力します。
    """
    results = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        addr = current_addr & ADDRESS_MASK
        word = peek_be(bus, addr, INSTRUCTION_SIZE)
        operation: Optional[Operation]
        try:
            operation = describe(bus, decode_word(word, addr))
        except DecodeError:
            operation = None

        if operation is None:
            results.append((addr, _hex_bytes(bus, addr, INSTRUCTION_SIZE), f"DB 0x{word:06X}"))
            current_addr += INSTRUCTION_SIZE
            continue

        text = operation.mnemonic
        if operation.operands:
            text += " " + ", ".join(operation.operands)
        results.append((addr, _hex_bytes(bus, addr, operation.length), text))
        current_addr += operation.length

    return results

def _hex_bytes(bus: Bus, addr: int, n: int) -> str:
    return " ".join(f"{b:02X}" for b in _peek_bytes(bus, addr, n))
