# little_machine/arch/little/isa.py
"""
Little Machine の命令セット定義。

オペコード、アドレッシングモード、オペランドサイズ、レジスタ番号、
syscall番号、そしてオペコードごとのオペランド分類を一か所にまとめます。
"""
from enum import IntEnum

# @intent:constant レジスタファイルとメモリの基本寸法。
NUM_REGISTERS = 32
REGISTER_MASK = 0xFFFFFFFF
INSTRUCTION_SIZE = 3

# @intent:constant 規約上の特殊レジスタ番号。
ZERO_INDEX = 0x00
SP_INDEX = 0x02
FLAGS_INDEX = 0x1F

# @intent:constant syscallのABIで使われるレジスタ。
REG_V0 = 0x03
REG_A0 = 0x05
REG_A1 = 0x06
REG_A2 = 0x07

# @intent:constant FLAGSレジスタのビット（CMPのみが設定する）。
EQUAL_FLAG = 0x1
GREATER_FLAG = 0x2

# @intent:constant 割り込みベクタテーブルの先頭アドレスとシステム割り込み番号。
INTERRUPT_TABLE_BASE = 0xFF7F
SYS_INTERRUPT = 0x0000

REGISTER_NAMES = [
    "zero", "at", "sp", "v0", "v1", "a0", "a1", "a2", "a3",
    "t0", "t1", "t2", "t3", "t4", "t5", "t6", "t7", "t8", "t9",
    "s0", "s1", "s2", "s3", "s4", "s5", "s6", "s7", "s8", "s9",
    "k0", "k1", "flags",
]

class Opcode(IntEnum):
    HLT = 0x00
    PUSH = 0x01
    POP = 0x02
    ADD = 0x03
    SUB = 0x04
    MUL = 0x05
    DIV = 0x06
    MOD = 0x07
    SHL = 0x08
    SHR = 0x09
    MOV = 0x0A
    XCHG = 0x0B
    AND = 0x0C
    OR = 0x0D
    XOR = 0x0E
    NAND = 0x0F
    NOR = 0x10
    XNOR = 0x11
    NOT = 0x12
    CMP = 0x13
    J = 0x14
    JE = 0x15
    JNE = 0x16
    JG = 0x17
    JGE = 0x18
    JL = 0x19
    JLE = 0x1A
    CALL = 0x1B
    RET = 0x1C
    INTERRUPT = 0x1D
    LEA = 0x1E

# @intent:responsibility アドレッシングモード。ビット0がアドレス、ビット1が即値を表すビットフラグです。
class AddressingMode(IntEnum):
    REGISTER = 0x0
    ABSOLUTE = 0x1
    IMMEDIATE = 0x2

# @intent:responsibility 2ビットのサイズコード。3は予約（デコードエラー）です。
class OperandSize(IntEnum):
    BYTE = 0
    WORD = 1
    DWORD = 2

    @property
    def bits(self) -> int:
        return 8 << self.value

    @property
    def suffix(self) -> str:
        return "BWD"[self.value]

class Syscall(IntEnum):
    STRING_LENGTH = 0
    STRING_COMPARE = 1
    READ_CHAR = 2
    READ_LINE = 3
    WRITE_CHAR = 4
    WRITE_STRING = 5
    WRITE_LINE = 6

# @intent:map ソースオペランドを持たないオペコード。
NO_SOURCE = frozenset({
    Opcode.HLT, Opcode.POP, Opcode.NOT,
    Opcode.J, Opcode.JE, Opcode.JNE, Opcode.JG, Opcode.JGE, Opcode.JL, Opcode.JLE,
    Opcode.CALL, Opcode.RET, Opcode.INTERRUPT,
})

# @intent:map デスティネーションオペランドを持たないオペコード。
NO_DESTINATION = frozenset({Opcode.HLT, Opcode.PUSH, Opcode.RET})

# @intent:map デスティネーションへ書き戻すオペコード。これらは即値のデスティネーションを取れません。
WRITES_BACK = frozenset({
    Opcode.POP, Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV, Opcode.MOD,
    Opcode.SHL, Opcode.SHR, Opcode.MOV, Opcode.XCHG,
    Opcode.AND, Opcode.OR, Opcode.XOR, Opcode.NAND, Opcode.NOR, Opcode.XNOR, Opcode.NOT,
})

# @intent:map ソース側にも書き込むオペコード。
WRITES_SOURCE = frozenset({Opcode.XCHG})

def has_source(opcode: int) -> bool:
    return opcode not in NO_SOURCE

def has_destination(opcode: int) -> bool:
    return opcode not in NO_DESTINATION

def opcode_name(opcode: int) -> str:
    try:
        return Opcode(opcode).name
    except ValueError:
        return "UNKNOWN"

# @intent:utility_function レジスタ名（"a0", "$5", "5"）をレジスタ番号に変換します。
def register_index(name) -> int:
    if isinstance(name, int):
        index = name
    else:
        text = str(name).strip().lower().lstrip("$")
        if text in REGISTER_NAMES:
            return REGISTER_NAMES.index(text)
        try:
            index = int(text, 0)
        except ValueError:
            raise ValueError(f"Unknown register: {name}") from None
    if not 0 <= index < NUM_REGISTERS:
        raise ValueError(f"Register index out of range: {name}")
    return index
