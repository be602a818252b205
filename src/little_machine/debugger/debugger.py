# little_machine/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from little_machine.core.cpu import AbstractCpu
from little_machine.core.snapshot import Snapshot, BusAccessType
from little_machine.core.state import CpuState

logger = logging.getLogger(__name__)

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    IO_READ = "IO_READ"                 # 特定のI/Oポートが読み込まれた
    IO_WRITE = "IO_WRITE"               # 特定のI/Oポートに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# バスアクセス種別で判定するブレークポイント
_ACCESS_CONDITIONS = {
    BreakpointConditionType.MEMORY_READ: BusAccessType.READ,
    BreakpointConditionType.MEMORY_WRITE: BusAccessType.WRITE,
    BreakpointConditionType.IO_READ: BusAccessType.IO_READ,
    BreakpointConditionType.IO_WRITE: BusAccessType.IO_WRITE,
}

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    register_name は CPU のレジスタマップのキー（例: "T0", "SP"）で、大文字小文字は区別しません。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_*/IO_*で使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True                  # 有効/無効状態

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    1命令ごとのSnapshotを履歴として保持し、逆方向の実行（step_back / run_back）をサポートします。
    """
    def __init__(self, cpu: AbstractCpu):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._last_snapshot: Optional[Snapshot] = None
        self._previous_registers: Dict[str, int] = {}
        # @intent:responsibility 実行履歴を保持し、タイムトラベルデバッグをサポートします。
        self._history: List[Snapshot] = []
        # @intent:responsibility 履歴が尽きた時に戻るための初期状態を保持します。
        self._initial_state: CpuState = self._cpu.get_state().copy()

    # @intent:responsibility 現在のCPU状態を新しい起点として履歴を破棄します（ロードやリセットの後に使用）。
    def reset_history(self) -> None:
        self._history = []
        self._last_snapshot = None
        self._initial_state = self._cpu.get_state().copy()

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        """
        既存のブレークポイントを更新します（有効/無効の切り替えなど）。
        """
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def is_running(self) -> bool:
        return self._running

    def _registers(self) -> Dict[str, int]:
        return {name.upper(): value for name, value in self._cpu.get_register_map().items()}

    def _pc_breakpoint_hit(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    def _check_other_breakpoints(self, snapshot: Snapshot, previous_registers: Dict[str, int]) -> bool:
        """
        Snapshotと現在のレジスタ値に基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        current_registers = self._registers()

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            access_type = _ACCESS_CONDITIONS.get(bp.condition_type)
            if access_type is not None:
                for access in snapshot.bus_activity:
                    if access.access_type == access_type and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE and bp.register_name:
                if current_registers.get(bp.register_name.upper()) == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE and bp.register_name:
                name = bp.register_name.upper()
                if name in current_registers and name in previous_registers:
                    if current_registers[name] != previous_registers[name]:
                        return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        """
        self._previous_registers = self._registers()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    def step_back(self) -> Optional[Snapshot]:
        """
        実行履歴を1つ戻り、CPUとメモリの状態を復元します。
        履歴が尽きた場合は初期状態に戻して None を返します。
        """
        if not self._history:
            return None

        snapshot_to_revert = self._history.pop()

        # バスアクティビティを逆順にスキャンし、書き込み操作を元に戻す
        bus = self._cpu.get_bus()
        for access in reversed(snapshot_to_revert.bus_activity):
            if access.access_type == BusAccessType.WRITE and access.previous_data is not None:
                bus.load(access.address, access.previous_data)

        if self._history:
            previous_snapshot = self._history[-1]
            self._cpu.restore_state(previous_snapshot.state)
            self._last_snapshot = previous_snapshot
            return previous_snapshot

        self._cpu.restore_state(self._initial_state)
        self._last_snapshot = None
        return None

    def run(self, max_steps: Optional[int] = None) -> Optional[Snapshot]:
        """
        HALT、ブレークポイント、stop()、または max_steps のいずれかまでCPUの実行を継続します。
        開始位置のPCブレークポイントは無視して1命令進めます。
        致命的なマシンエラーはそのまま送出されます。
        """
        self._running = True
        steps = 0
        try:
            while self._running and not self._cpu.is_halted():
                time.sleep(0)
                if max_steps is not None and steps >= max_steps:
                    break

                current_pc = self._cpu.get_state().pc
                if steps > 0 and self._pc_breakpoint_hit(current_pc):
                    logger.info("Breakpoint hit at PC: %#06x", current_pc)
                    break

                previous_registers = self._registers()
                snapshot = self.step_instruction()
                steps += 1

                if self._check_other_breakpoints(snapshot, previous_registers):
                    logger.info("Breakpoint hit at PC: %#06x", snapshot.state.pc)
                    break
        finally:
            self._running = False
        return self._last_snapshot

    def run_back(self) -> Optional[Snapshot]:
        """
        CPUの実行を逆方向（過去）へ連続的に戻します。
        戻った時点のSnapshot（＝その命令実行直後の状態）でブレークポイントを評価します。
        """
        self._running = True
        try:
            while self._running:
                time.sleep(0)
                previous_registers = self._registers()
                snapshot = self.step_back()

                if snapshot is None:
                    logger.info("Reached start of history.")
                    return None

                if self._pc_breakpoint_hit(snapshot.state.pc):
                    logger.info("Reverse Breakpoint hit at PC: %#06x", snapshot.state.pc)
                    return snapshot

                if self._check_other_breakpoints(snapshot, previous_registers):
                    logger.info("Reverse Breakpoint hit at PC: %#06x", snapshot.state.pc)
                    return snapshot
            return self._last_snapshot
        finally:
            self._running = False

    def stop(self) -> None:
        self._running = False
