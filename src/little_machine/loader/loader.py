# little_machine/loader/loader.py
"""
コードローダーモジュール。
フラットなバイナリイメージ（ヘッダもリロケーションも無い生のバイト列）のロードをサポートします。
"""
import logging

from little_machine.transport.bus import Bus, MEMORY_SIZE

logger = logging.getLogger(__name__)

class BinaryImageLoader:
    """
    バイナリイメージをそのままバスにロードするローダー。
    ロードはログに残らない Bus.load を使うため、最初の step のバスアクティビティには現れません。
    """
    # @intent:responsibility ファイルを読み込み、base_address からメモリへ配置します。
    # @intent:return ロードしたバイト数。
    def load_binary(self, file_path: str, bus: Bus, base_address: int = 0x0000) -> int:
        with open(file_path, 'rb') as f:
            data = f.read()
        size = self.load_bytes(data, bus, base_address)
        logger.info("Loaded %d bytes from %s at %#06x", size, file_path, base_address)
        return size

    # @intent:pre-condition イメージはアドレス空間の末尾を越えてはなりません。
    def load_bytes(self, data: bytes, bus: Bus, base_address: int = 0x0000) -> int:
        if not 0 <= base_address < MEMORY_SIZE:
            raise ValueError(f"Load address {base_address:#x} is outside the address space")
        if base_address + len(data) > MEMORY_SIZE:
            raise ValueError(
                f"Image of {len(data)} bytes does not fit in memory at {base_address:#06x} "
                f"({MEMORY_SIZE - base_address} bytes available)"
            )
        for offset, byte in enumerate(data):
            bus.load(base_address + offset, byte)
        return len(data)
