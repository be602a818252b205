"""
逆アセンブルコードを表示するウィジェット。
"""
from typing import List, Tuple

from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView
from PySide6.QtGui import QColor

from little_machine.core.cpu import AbstractCpu
from little_machine.ui.fonts import get_monospace_font

# 一度に逆アセンブルするバイト数
DISASSEMBLY_RANGE = 0x400

# @intent:responsibility 逆アセンブルされたコードを表形式で表示し、現在のPCをハイライトするUIウィジェットを提供します。
class CodeView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Address", "Bytes", "Mnemonic"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.Stretch)
        self.table.setFont(get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setShowGrid(False)
        self.table.setStyleSheet("background-color: #101010; color: #BBBBBB; gridline-color: #303030;")
        self.layout.addWidget(self.table)

        # 現在表示している逆アセンブルデータ [(addr, hex, mnemonic), ...]
        self.disassembled_data: List[Tuple[int, str, str]] = []

    # @intent:responsibility PC周辺を逆アセンブルして表示を更新します。
    def update_code(self, cpu: AbstractCpu, pc: int):
        """
        PCが現在の表示範囲内の命令境界にあれば、再描画せずにハイライト移動のみ行います。
        """
        row_index = next((i for i, (addr, _, _) in enumerate(self.disassembled_data) if addr == pc), -1)

        if row_index == -1:
            self.disassembled_data = cpu.disassemble(pc, DISASSEMBLY_RANGE)
            self.table.setRowCount(len(self.disassembled_data))
            for row, (addr, hex_dump, mnemonic) in enumerate(self.disassembled_data):
                self.table.setItem(row, 0, QTableWidgetItem(f"{addr:04X}"))
                self.table.setItem(row, 1, QTableWidgetItem(hex_dump))
                self.table.setItem(row, 2, QTableWidgetItem(mnemonic))
                if addr == pc:
                    row_index = row

        highlight = QColor("#404000")
        normal = QColor("#101010")
        for row in range(self.table.rowCount()):
            for column in range(3):
                self.table.item(row, column).setBackground(highlight if row == row_index else normal)

        if row_index != -1:
            self.table.scrollToItem(self.table.item(row_index, 0), QTableWidget.EnsureVisible)
            # 常に数行先まで見えるようにする
            look_ahead_index = min(row_index + 5, self.table.rowCount() - 1)
            if look_ahead_index > row_index:
                self.table.scrollToItem(self.table.item(look_ahead_index, 0), QTableWidget.EnsureVisible)

    # @intent:responsibility メモリ内容が外部で変更された場合（ロードなど）にキャッシュを破棄します。
    def reset_cache(self):
        self.disassembled_data = []
        self.table.setRowCount(0)
