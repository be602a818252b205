# little_machine/ui/hex_view.py
"""
メモリの内容を16進数とASCIIで表示するウィジェット。
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QPlainTextEdit
from PySide6.QtGui import QTextCharFormat, QTextCursor, QColor, QTextOption

from little_machine.transport.bus import Bus, MEMORY_SIZE
from little_machine.diagnostics.dump import format_memory_dump, BYTES_PER_ROW
from little_machine.ui.fonts import get_monospace_font

# 一度に表示するバイト数
WINDOW_SIZE = 0x1000

# @intent:responsibility ハイライト対象のアドレスを含む表示ウィンドウの先頭アドレスを求めます。
def window_start(address: int, window: int = WINDOW_SIZE) -> int:
    start = (address - window // 2) & ~(BYTES_PER_ROW - 1)
    return max(0, min(start, MEMORY_SIZE - window))

# @intent:responsibility メモリの内容を16進数とASCII形式で表示するUIウィジェットを提供します。
class HexView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.editor = QPlainTextEdit(self)
        self.editor.setFont(get_monospace_font(10))
        self.editor.setReadOnly(True)
        self.editor.setWordWrapMode(QTextOption.NoWrap)
        self.editor.setStyleSheet("background-color: #101010; color: #BBBBBB;")
        self.layout.addWidget(self.editor)
        self.start_address = 0

    # @intent:responsibility highlight_address 周辺のメモリを読み込み、その行をハイライトします。
    def update_memory(self, bus: Bus, highlight_address: Optional[int] = None):
        """
        表示は diagnostics のダンプ形式と同じで、peek を使うためバスのログを汚しません。
        """
        center = highlight_address if highlight_address is not None else self.start_address
        self.start_address = window_start(center)
        self.editor.setPlainText(format_memory_dump(bus, WINDOW_SIZE, self.start_address))

        if highlight_address is None:
            return
        line_to_highlight = (highlight_address - self.start_address) // BYTES_PER_ROW
        cursor = self.editor.textCursor()
        cursor.movePosition(QTextCursor.Start)
        cursor.movePosition(QTextCursor.Down, QTextCursor.MoveAnchor, line_to_highlight)
        fmt = QTextCharFormat()
        fmt.setBackground(QColor("#404000"))
        cursor.select(QTextCursor.BlockUnderCursor)
        cursor.mergeCharFormat(fmt)
        self.editor.setTextCursor(cursor)
        self.editor.ensureCursorVisible()
