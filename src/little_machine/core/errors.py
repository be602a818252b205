# little_machine/core/errors.py
"""
実行を中断させる致命的エラーの定義。

未サポート命令のような回復可能な事象は例外ではなく、
snapshot.UnsupportedOpcode というイベント値で表現されます。
"""
from typing import Optional

class MachineError(Exception):
    """
    実行ループを停止させるエラーの基底クラス。
    再現に必要な命令アドレス(pc)とオペコードを保持します。
    """
    def __init__(self, message: str, pc: int, opcode: Optional[int] = None):
        self.pc = pc
        self.opcode = opcode
        context = f"PC={pc:#06x}"
        if opcode is not None:
            context += f", opcode={opcode:#04x}"
        super().__init__(f"{message} ({context})")
        self.reason = message

# @intent:responsibility 命令語が解釈できない場合（予約サイズコード、即値の書き戻し先など）に送出されます。
class DecodeError(MachineError):
    pass

# @intent:responsibility DIV/MOD の除数が0の場合に送出されます。
class DivideByZero(MachineError):
    def __init__(self, pc: int, opcode: Optional[int] = None):
        super().__init__("Division by zero", pc, opcode)
