# little_machine/ui/console_view.py
"""
syscallのコンソール入出力をウィンドウ内で扱うためのストリームとウィジェット。

ConsoleStream はバイナリストリームとして ConsoleDevice に渡されます。
読み込みは実行スレッド側でブロックし、入力欄からの行を待ちます。
入力欄のテキストはUTF-8でバイト列にし、出力バイト列はUTF-8として表示します。
"""
import codecs
import queue
import threading

from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtWidgets import QWidget, QVBoxLayout, QPlainTextEdit, QLineEdit
from PySide6.QtGui import QTextCursor

from little_machine.ui.fonts import get_monospace_font

# 入力待ちの間に停止要求を確認する間隔（秒）
POLL_INTERVAL = 0.05

# @intent:responsibility ConsoleDevice が読み書きするバイナリストリーム。
class ConsoleStream(QObject):
    """
    write() はデコードしたテキストをシグナルとしてUIスレッドへ送り、
    read() は feed() されたバイトを1バイトずつ返します。
    close_input() 以降に入力が尽きた場合と、cancel_read() で停止を要求された場合は
    空のバイト列（EOF）を返します。
    """
    text_written = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._pending = queue.Queue()
        self._closed = False
        self._cancelled = threading.Event()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, text: str) -> None:
        for byte in text.encode("utf-8"):
            self._pending.put(byte)

    def close_input(self) -> None:
        self._closed = True
        self._cancelled.set()

    # @intent:responsibility 入力待ちのread()を起こし、EOFを返させます（Stop用）。
    def cancel_read(self) -> None:
        self._cancelled.set()

    def resume_input(self) -> None:
        if not self._closed:
            self._cancelled.clear()

    # @intent:responsibility 未読の入力とデコード途中の出力を捨てます（リセットや再ロード用）。
    def reset(self) -> None:
        self._decoder.reset()
        while True:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                return

    def read(self, size: int = 1) -> bytes:
        while True:
            try:
                return bytes([self._pending.get(timeout=POLL_INTERVAL)])
            except queue.Empty:
                if self._cancelled.is_set():
                    return b""

    def write(self, data: bytes) -> int:
        text = self._decoder.decode(bytes(data))
        if text:
            self.text_written.emit(text)
        return len(data)

    def flush(self) -> None:
        pass
# @intent:responsibility プログラムの出力表示と1行単位の入力欄を提供します。
class ConsoleView(QWidget):
    def __init__(self, stream: ConsoleStream, parent=None):
        super().__init__(parent)
        self.stream = stream
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.output = QPlainTextEdit(self)
        self.output.setReadOnly(True)
        self.output.setFont(get_monospace_font(10))
        self.output.setStyleSheet("background-color: #101010; color: #BBBBBB;")
        self.layout.addWidget(self.output)

        self.input = QLineEdit(self)
        self.input.setPlaceholderText("Program input (Enter to send)")
        self.input.returnPressed.connect(self._send_line)
        self.layout.addWidget(self.input)

        self.stream.text_written.connect(self.append_text)

    @Slot(str)
    def append_text(self, text: str) -> None:
        cursor = self.output.textCursor()
        cursor.movePosition(QTextCursor.End)
        cursor.insertText(text)
        self.output.setTextCursor(cursor)

    @Slot()
    def _send_line(self) -> None:
        self.stream.feed(self.input.text() + "\n")
        self.input.clear()

    def clear(self) -> None:
        self.output.clear()
