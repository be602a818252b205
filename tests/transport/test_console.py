# tests/transport/test_console.py
"""
little_machine.transport.consoleモジュールの単体テスト。
"""
import io

import pytest

from little_machine.transport.bus import Bus
from little_machine.transport.console import ConsoleDevice, CONSOLE_PORT, CONSOLE_EOF

# @intent:test_suite コンソールデバイスの1バイト入出力とEOFの扱いを検証します。

class TestConsoleDevice:
    def test_read_one_byte_at_a_time(self):
        console = ConsoleDevice(io.BytesIO(b"hi"), io.BytesIO())
        assert console.read(0) == ord("h")
        assert console.read(0) == ord("i")

    def test_read_at_eof_returns_ff(self):
        console = ConsoleDevice(io.BytesIO(b""), io.BytesIO())
        assert console.read(0) == CONSOLE_EOF == 0xFF

    def test_write_emits_byte(self):
        output = io.BytesIO()
        console = ConsoleDevice(io.BytesIO(), output)
        console.write(0, 0x41)
        console.write(0, 0x0A)
        assert output.getvalue() == b"A\n"

    # @intent:test_case_high_bytes 0x80以上のバイトは文字コード変換されずにそのまま入出力されます。
    @pytest.mark.parametrize("value", [0x80, 0xA4, 0xC3, 0xE9, 0xFE])
    def test_high_bytes_pass_through(self, value):
        output = io.BytesIO()
        console = ConsoleDevice(io.BytesIO(bytes([value])), output)
        assert console.read(0) == value
        console.write(0, value)
        assert output.getvalue() == bytes([value])

    def test_invalid_utf8_input_is_read_as_bytes(self):
        console = ConsoleDevice(io.BytesIO(b"\xc3\x28"), io.BytesIO())
        assert [console.read(0), console.read(0)] == [0xC3, 0x28]

    def test_write_keeps_low_eight_bits(self):
        output = io.BytesIO()
        ConsoleDevice(io.BytesIO(), output).write(0, 0x1E9)
        assert output.getvalue() == b"\xe9"

    # @intent:test_case_bus バスのI/Oポート経由で読み書きできることを検証します。
    def test_through_bus_port(self):
        output = io.BytesIO()
        bus = Bus()
        bus.register_io_device(CONSOLE_PORT, CONSOLE_PORT, ConsoleDevice(io.BytesIO(b"Z"), output))
        assert bus.read_io(CONSOLE_PORT) == ord("Z")
        bus.write_io(CONSOLE_PORT, ord("!"))
        assert output.getvalue() == b"!"

    def test_defaults_to_process_streams(self, capsysbinary, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"\xffq")))
        console = ConsoleDevice()
        assert console.read(0) == 0xFF
        assert console.read(0) == ord("q")
        console.write(0, 0xE9)
        assert capsysbinary.readouterr().out == b"\xe9"
