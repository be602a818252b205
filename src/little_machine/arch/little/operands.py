# little_machine/arch/little/operands.py
"""
オペランドリゾルバ。

アドレッシングモードから読み書き可能な位置（Location）を求め、
命令の宣言幅と符号に従って値を読み書きします。

Location はレジスタとメモリを区別するタグ付きの値で、
2つの異なる記憶領域を同じポインタ型で扱うことはしません。
"""
from dataclasses import dataclass
from typing import Union

from little_machine.transport.bus import Bus, ADDRESS_MASK, read_be, write_be
from little_machine.arch.little.isa import AddressingMode, REGISTER_MASK, ZERO_INDEX
from little_machine.arch.little.state import LittleCpuState

@dataclass(frozen=True)
class RegisterLocation:
    index: int

@dataclass(frozen=True)
class MemoryLocation:
    address: int

# @intent:responsibility レジスタ0をデスティネーションにした場合の「捨て先」。
#                       書き込みは無視され、読み込みは0を返します。
@dataclass(frozen=True)
class DiscardLocation:
    pass

DISCARD = DiscardLocation()

Location = Union[RegisterLocation, MemoryLocation, DiscardLocation]

def size_mask(width: int) -> int:
    return (1 << width) - 1

# @intent:utility_function width ビットの値を、ビット(width-1)を見て32ビットへ符号拡張します。
def sign_extend(value: int, width: int) -> int:
    value &= size_mask(width)
    if value & (1 << (width - 1)):
        value |= REGISTER_MASK & ~size_mask(width)
    return value

# @intent:utility_function 32ビットの2の補数表現をPythonの符号付き整数に変換します。
def to_signed(value: int, width: int = 32) -> int:
    value &= size_mask(width)
    if value & (1 << (width - 1)):
        return value - (1 << width)
    return value

# @intent:responsibility モードに従ってオペランドの位置を求めます。
# @intent:post-condition 即値と絶対アドレスの場合、state.pc はオペランドの長さだけ進みます。
def resolve(state: LittleCpuState, bus: Bus, reg_index: int, mode: AddressingMode,
            indirect: bool, width: int, destination: bool = False) -> Location:
    """
    - REGISTER: レジスタそのもの。デスティネーションのレジスタ0は DISCARD になります。
    - IMMEDIATE: PCの位置の width/8 バイト。
    - ABSOLUTE: PCの位置の4バイトを32ビット値として読み、16ビットにマスクしたアドレス。
      宣言幅にかかわらず常に4バイト読みます。
    - indirect: 上記の位置の内容を32ビット値として読み、16ビットにマスクして
      新しいメモリアドレスとします（1段階のみ）。
    """
    if mode == AddressingMode.REGISTER:
        if destination and reg_index == ZERO_INDEX:
            return DISCARD
        location: Location = RegisterLocation(reg_index)
    elif mode == AddressingMode.IMMEDIATE:
        location = MemoryLocation(state.pc)
        state.pc = (state.pc + width // 8) & ADDRESS_MASK
    else:
        pointer = read_be(bus, state.pc, 4)
        location = MemoryLocation(pointer & ADDRESS_MASK)
        state.pc = (state.pc + 4) & ADDRESS_MASK

    if indirect:
        pointer = read_location(state, bus, location, 32)
        location = MemoryLocation(pointer & ADDRESS_MASK)
    return location

# @intent:responsibility 位置から宣言幅の値を読み込みます。
def read_location(state: LittleCpuState, bus: Bus, location: Location, width: int, signed: bool = False) -> int:
    """
    下位 width ビットを返します。signed の場合は32ビットへ符号拡張し、
    そうでなければゼロ拡張します。メモリ上の値はビッグエンディアンです。
    """
    if isinstance(location, RegisterLocation):
        raw = state.read_register(location.index) & size_mask(width)
    elif isinstance(location, MemoryLocation):
        raw = read_be(bus, location.address, width // 8)
    else:
        raw = 0
    return sign_extend(raw, width) if signed else raw

# @intent:responsibility 位置へ宣言幅の値を書き込みます。
# @intent:rationale 宣言幅の外側のビットは変更しません。レジスタは読み出し・変更・書き戻し、
#                  メモリは幅ちょうどのバイト数だけを書き込みます。
def write_location(state: LittleCpuState, bus: Bus, location: Location, width: int, value: int) -> None:
    mask = size_mask(width)
    if isinstance(location, RegisterLocation):
        current = state.read_register(location.index)
        state.write_register(location.index, (current & ~mask) | (value & mask))
    elif isinstance(location, MemoryLocation):
        write_be(bus, location.address, width // 8, value & mask)
