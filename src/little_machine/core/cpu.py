# little_machine/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from little_machine.transport.bus import Bus
from little_machine.core.snapshot import Snapshot, Operation, Metadata, UnsupportedOpcode
from little_machine.core.state import CpuState
from little_machine.common.types import RegisterLayoutInfo

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._instruction_count: int = 0
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:responsibility I/O空間（Port I/O）をサポートするかどうかを返します。
    @property
    @abstractmethod
    def has_io_port(self) -> bool:
        pass

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._instruction_count = 0

    def get_state(self) -> CpuState:
        """
        現在のCPUの状態を返します（複製ではありません）。
        """
        return self._state

    # @intent:responsibility 保存しておいた状態を復元します。履歴の巻き戻しで使用されます。
    def restore_state(self, state: CpuState) -> None:
        self._state = state.copy()

    def get_bus(self) -> Bus:
        return self._bus

    def is_halted(self) -> bool:
        return self._state.halted

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCから命令語をフェッチして返します。PCはここでは更新しません。
        """
        pass

    @abstractmethod
    def _decode(self, word: int) -> Operation:
        """
        命令語を解析し、デコード済み命令を含むOperationを返します。
        解釈できない命令語の場合は DecodeError を送出します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> Optional[UnsupportedOpcode]:
        """
        デコードされた命令を実行し、CPUの状態を更新します。
        未サポート命令だった場合はそのイベントを返します。
        """
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ログクリア→HALT判定→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        """
        CPUを1命令進め、その時点でのCPUとバスの状態を含むSnapshotを返します。
        DecodeError や DivideByZero はそのまま呼び出し元へ伝播します。
        """
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        halt_snapshot = self._handle_halt(initial_pc)
        if halt_snapshot:
            return halt_snapshot

        word = self._fetch()
        operation = self._decode(word)
        self._update_pc(operation)
        event = self._execute(operation)
        if event is not None:
            logger.warning("Unsupported instruction %s (opcode %#04x) at PC=%#06x",
                           event.mnemonic, event.opcode, event.pc)

        return self._create_snapshot(initial_pc, operation, event)

    # @intent:responsibility HALT状態の場合の処理を行います。
    # @intent:return HALT中であればその状態のSnapshot、そうでなければNone。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        if not self._state.halted:
            return None
        operation = Operation(opcode_hex="", mnemonic="HALTED", length=0)
        return Snapshot(
            state=self._state.copy(),
            operation=operation,
            metadata=Metadata(instruction_count=self._instruction_count, symbol_info="HALTED"),
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # @intent:responsibility 命令実行前にPCを更新します。デフォルトは命令長分進めます。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    def _create_snapshot(self, initial_pc: int, operation: Operation,
                         event: Optional[UnsupportedOpcode] = None) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._instruction_count += 1

        symbol_info = f"{initial_pc:04X}: {operation.mnemonic}"
        if operation.operands:
            symbol_info += " " + ", ".join(operation.operands)
        logger.debug("%s", symbol_info)

        return Snapshot(
            state=self._state.copy(),
            operation=operation,
            metadata=Metadata(instruction_count=self._instruction_count, symbol_info=symbol_info),
            bus_activity=bus_activity,
            event=event,
        )

    # @intent:responsibility HALTするまで（または最大命令数に達するまで）実行を続けます。
    def run(self, max_steps: Optional[int] = None) -> int:
        """
        実行した命令数を返します。致命的エラーはそのまま送出されます。
        """
        steps = 0
        while not self._state.halted:
            if max_steps is not None and steps >= max_steps:
                break
            self.step()
            steps += 1
        return steps

    def get_instruction_count(self) -> int:
        return self._instruction_count

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        UIやダンプがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
