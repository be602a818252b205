# little_machine/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態を保持するデータ構造を定義します。
"""
import copy
from dataclasses import dataclass

# @intent:responsibility CPUの状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUの状態を保持するデータクラス。
    これは抽象的な基底状態であり、特定のCPUアーキテクチャに応じて拡張されます。
    """
    pc: int = 0x0000  # Program Counter
    halted: bool = False

    # @intent:responsibility スナップショットや履歴用に、共有されない完全な複製を返します。
    # @intent:rationale レジスタファイルがリストのため、浅いコピーでは実行中の変更が履歴に漏れます。
    def copy(self) -> "CpuState":
        return copy.deepcopy(self)
