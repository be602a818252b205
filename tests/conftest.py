# tests/conftest.py
"""
テスト共通のフィクスチャ。
64KiBのRAMとポート0のコンソールを持つマシンを組み立てます。
"""
import io
import os

import pytest

# UIテストはディスプレイの無い環境でも動作させる
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from little_machine.transport.bus import Bus, RAM, MEMORY_SIZE
from little_machine.transport.console import ConsoleDevice, CONSOLE_PORT
from little_machine.arch.little.cpu import LittleCpu
from little_machine.arch.little.isa import register_index

class Machine:
    """
    テスト用のマシン一式。output にはコンソール出力のバイト列が蓄積されます。
    """
    def __init__(self, input_data: bytes = b""):
        self.output = io.BytesIO()
        self.console = ConsoleDevice(io.BytesIO(input_data), self.output)
        self.bus = Bus()
        self.bus.register_device(0x0000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))
        self.bus.register_io_device(CONSOLE_PORT, CONSOLE_PORT, self.console)
        self.cpu = LittleCpu(self.bus)

    @property
    def state(self):
        return self.cpu.get_state()

    # @intent:utility_function バイト列を連結して address からロードし、終端アドレスを返します。
    def load(self, *chunks: bytes, address: int = 0x0000) -> int:
        data = b"".join(chunks)
        for offset, byte in enumerate(data):
            self.bus.load(address + offset, byte)
        return address + len(data)

    def reg(self, name) -> int:
        return self.state.read_register(register_index(name))

@pytest.fixture
def make_machine():
    return Machine

@pytest.fixture
def machine():
    return Machine()

# PySide6のテストにはQApplicationのインスタンスが必要
@pytest.fixture(scope="session")
def qapp():
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
