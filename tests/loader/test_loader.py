# tests/loader/test_loader.py
"""
little_machine.loader.loaderモジュールの単体テスト。
フラットなバイナリイメージのロードを検証します。
"""
import pytest

from little_machine.loader.loader import BinaryImageLoader

# @intent:test_suite バイナリイメージローダーの検証。

class TestBinaryImageLoader:
    @pytest.fixture
    def setup_loader(self, machine, tmp_path):
        return BinaryImageLoader(), machine, tmp_path

    def test_load_binary_at_zero(self, setup_loader):
        loader, machine, tmp_path = setup_loader
        image = tmp_path / "program.bin"
        image.write_bytes(bytes([0x50, 0x01, 0x20, 0xAA]))

        size = loader.load_binary(str(image), machine.bus)

        assert size == 4
        assert [machine.bus.peek(a) for a in range(5)] == [0x50, 0x01, 0x20, 0xAA, 0x00]

    def test_load_binary_at_base_address(self, setup_loader):
        loader, machine, tmp_path = setup_loader
        image = tmp_path / "program.bin"
        image.write_bytes(b"\x01\x02")
        loader.load_binary(str(image), machine.bus, 0x1000)
        assert machine.bus.peek(0x1000) == 0x01
        assert machine.bus.peek(0x1001) == 0x02
        assert machine.bus.peek(0x0000) == 0x00

    # @intent:test_case_no_bus_log ロードはバスのアクティビティログに残りません。
    def test_load_is_not_logged(self, setup_loader):
        loader, machine, _ = setup_loader
        loader.load_bytes(b"\x01\x02\x03", machine.bus)
        assert machine.bus.get_and_clear_activity_log() == []

    def test_image_filling_memory_exactly(self, setup_loader):
        loader, machine, _ = setup_loader
        assert loader.load_bytes(b"\x7F" * 0x10, machine.bus, 0xFFF0) == 0x10
        assert machine.bus.peek(0xFFFF) == 0x7F

    def test_image_too_large(self, setup_loader):
        loader, machine, _ = setup_loader
        with pytest.raises(ValueError, match="does not fit"):
            loader.load_bytes(b"\x00" * 0x11, machine.bus, 0xFFF0)

    def test_load_address_outside_memory(self, setup_loader):
        loader, machine, _ = setup_loader
        with pytest.raises(ValueError, match="outside the address space"):
            loader.load_bytes(b"\x00", machine.bus, 0x10000)

    def test_missing_file(self, setup_loader):
        loader, machine, tmp_path = setup_loader
        with pytest.raises(FileNotFoundError):
            loader.load_binary(str(tmp_path / "missing.bin"), machine.bus)

    def test_empty_image(self, setup_loader):
        loader, machine, tmp_path = setup_loader
        image = tmp_path / "empty.bin"
        image.write_bytes(b"")
        assert loader.load_binary(str(image), machine.bus) == 0
