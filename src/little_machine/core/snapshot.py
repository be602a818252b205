# little_machine/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
UIへの情報提供と、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from little_machine.core.state import CpuState
from little_machine.transport.bus import BusAccessType, BusAccess

# @intent:responsibility 実行された命令の表示用の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    instruction にはアーキテクチャ固有のデコード済み命令が入ります。
    """
    opcode_hex: str # 例: "0A8C10"
    mnemonic: str # 例: "MOV.D"
    operands: List[str] = field(default_factory=list) # 例: ["#0x00000041", "v0"]
    operand_bytes: List[int] = field(default_factory=list) # 命令語に続く生のオペランドバイト
    length: int = 3 # 命令のバイト長（オペランドを含む）
    instruction: Optional[Any] = None

# @intent:responsibility 回復可能な「未サポート命令」イベントを値として表現します。
@dataclass(frozen=True)
class UnsupportedOpcode:
    """
    オペコード表に実行関数が無かったことを示すイベント。実行は次の命令へ継続します。
    """
    pc: int
    opcode: int
    mnemonic: str

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    累計実行命令数と表示用シンボル情報。
    """
    instruction_count: int
    symbol_info: Optional[str] = None # 例: "MOV.D #0x00000041, v0"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPUとバスの状態を記録した不変のデータ構造。
    state は実行直後の状態の複製であり、以降の実行で変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
    event: Optional[UnsupportedOpcode] = None

__all__ = [
    "BusAccess", "BusAccessType", "Metadata", "Operation", "Snapshot", "UnsupportedOpcode",
]
