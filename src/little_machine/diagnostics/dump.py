# little_machine/diagnostics/dump.py
"""
メモリとレジスタの内容をテキストとして整形する診断用ユーティリティ。

バスは peek で読むため、アクティビティログを汚しません。
"""
from typing import List

from little_machine.core.cpu import AbstractCpu
from little_machine.transport.bus import Bus, ADDRESS_MASK

BYTES_PER_ROW = 16

# @intent:responsibility 指定範囲のメモリを16進数とASCIIで1行16バイトずつ整形します。
def format_memory_dump(bus: Bus, length: int, offset: int = 0) -> str:
    """
    各行は "AAAA: XX XX ... XX  ascii" の形式です。
    長さが16の倍数でない場合、最後の行は短くなります。
    """
    lines: List[str] = []
    for row_start in range(offset, offset + length, BYTES_PER_ROW):
        count = min(BYTES_PER_ROW, offset + length - row_start)
        hex_part = []
        ascii_part = []
        for i in range(count):
            byte_val = bus.peek((row_start + i) & ADDRESS_MASK)
            hex_part.append(f"{byte_val:02X}")
            ascii_part.append(chr(byte_val) if 32 <= byte_val <= 126 else '.')
        lines.append(
            f"{row_start & ADDRESS_MASK:04X}: {' '.join(hex_part).ljust(BYTES_PER_ROW * 3 - 1)}  {''.join(ascii_part)}"
        )
    return "\n".join(lines)

# @intent:responsibility レジスタマップを "NAME=0xVALUE" の形式で1行4個ずつ整形します。
def format_register_dump(cpu: AbstractCpu) -> str:
    entries = []
    for name, value in cpu.get_register_map().items():
        digits = 4 if name == "PC" else 8
        entries.append(f"{name:>5}=0x{value:0{digits}X}")

    flags = " ".join(f"{name}={int(value)}" for name, value in cpu.get_flag_state().items())
    lines = ["  ".join(entries[i:i + 4]) for i in range(0, len(entries), 4)]
    lines.append(f"FLAGS: {flags}" + ("  [HALTED]" if cpu.is_halted() else ""))
    return "\n".join(lines)
