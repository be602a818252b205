# little_machine/transport/console.py
"""
Transport Layer (コンソールデバイス)

syscall機能が使う唯一の実行時外部インターフェースである、
1バイト単位の同期的な入出力チャネルをI/Oデバイスとして提供します。
テキストとしての解釈（文字コード）は行わず、バイトをそのまま通します。
"""
import sys
from typing import BinaryIO, Optional

from little_machine.transport.bus import Device

# @intent:constant コンソールを接続するI/Oポート番号。
CONSOLE_PORT = 0x00
# @intent:constant 入力終端（EOF）時に返す値。-1 の下位8ビット。
CONSOLE_EOF = 0xFF

# @intent:responsibility バイナリストリームをラップし、バイト単位の読み書きを提供します。
class ConsoleDevice(Device):
    """
    入力ストリームから1バイト読み込み、出力ストリームへ1バイト書き出すI/Oデバイス。
    ストリームを省略した場合は呼び出し時点の sys.stdin.buffer / sys.stdout.buffer を使います。
    """
    def __init__(self, input_stream: Optional[BinaryIO] = None, output_stream: Optional[BinaryIO] = None):
        self._input = input_stream
        self._output = output_stream

    # @intent:responsibility 入力を1バイトブロッキングで読み込みます。
    def read(self, address: int) -> int:
        stream = self._input if self._input is not None else sys.stdin.buffer
        data = stream.read(1)
        if not data:
            return CONSOLE_EOF
        return data[0]

    # @intent:responsibility 下位8ビットを1バイトとして出力し、即座にフラッシュします。
    def write(self, address: int, data: int) -> None:
        stream = self._output if self._output is not None else sys.stdout.buffer
        stream.write(bytes([data & 0xFF]))
        stream.flush()
