# little_machine/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、マシン全体のメモリアドレス空間とI/O空間を抽象化し、
読み書きアクセスを適切なデバイスに委譲する責務を負います。
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

# @intent:constant メモリの物理サイズとアドレスマスク。アドレスは常に16ビットに丸められます。
MEMORY_SIZE = 0x10000
ADDRESS_MASK = 0xFFFF

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"
    IO_READ = "IO_READ"
    IO_WRITE = "IO_WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    書き込みの場合、previous_data に書き込み前の値が入り、履歴の巻き戻しに使われます。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType
    previous_data: Optional[int] = None

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        """
        指定されたオフセットから8bitのデータを読み出します。
        """
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        """
        指定されたオフセットに8bitのデータを書き込みます。
        """
        pass

# @intent:responsibility 基本的なRAMデバイスの機能を提供します。
class RAM(Device):
    """
    ゼロ初期化されたバイト配列によるRAMデバイス。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility メモリアドレス空間とI/O空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    メモリアドレス空間とI/Oポート空間を管理する共通バス。
    read/write/read_io/write_io は全てアクティビティログに記録されます。
    peek/load はインスペクタやローダー向けのログなしアクセスです。
    """
    def __init__(self):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._io_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []

    def _log_access(self, address: int, data: int, access_type: BusAccessType,
                    previous_data: Optional[int] = None) -> None:
        self._bus_activity_log.append(BusAccess(address, data, access_type, previous_data))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:pre-condition start_address <= end_addressかつ非負であり、deviceはDeviceのインスタンスである必要があります。
    # @intent:rationale アドレス範囲の重複チェックは行いません。システム構成の層で管理されるべきです。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        """
        指定されたアドレス範囲にデバイスを登録します。
        """
        self._validate_range(start_address, end_address, device)
        self._memory_map.append((start_address, end_address, device))

    # @intent:responsibility 指定されたI/Oポート範囲にデバイスを登録します。
    def register_io_device(self, start_port: int, end_port: int, device: Device) -> None:
        self._validate_range(start_port, end_port, device)
        self._io_map.append((start_port, end_port, device))

    def _validate_range(self, start: int, end: int, device: Device) -> None:
        if not (0 <= start <= end):
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")
        if isinstance(device, RAM):
            expected_size = end - start + 1
            if device.get_size() != expected_size:
                raise ValueError(
                    f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                    f"the specified address range size ({expected_size} bytes)."
                )

    # @intent:post-condition デバイスが見つからなかった場合、IndexErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise IndexError(f"Address {address:#06x} not mapped to any device.")

    def _find_io_device(self, port: int) -> Optional[Tuple[Device, int]]:
        for start, end, device in self._io_map:
            if start <= port <= end:
                return device, port - start
        return None

    def read(self, address: int) -> int:
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        """
        UIやダンプ、逆アセンブラなどのインスペクタ用。
        """
        device, offset = self._find_device(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        previous = device.read(offset)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE, previous)

    # @intent:responsibility ログを記録せずにメモリへ書き込みます（ローダー・履歴巻き戻し用）。
    def load(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)

    # @intent:responsibility 指定されたI/Oポートから8bitのデータを読み出します。
    def read_io(self, port: int) -> int:
        """
        マップされていないポートは常に0を返します。アクセスはログに記録されます。
        """
        found = self._find_io_device(port)
        data = found[0].read(found[1]) & 0xFF if found else 0x00
        self._log_access(port, data, BusAccessType.IO_READ)
        return data

    def write_io(self, port: int, data: int) -> None:
        found = self._find_io_device(port)
        if found:
            found[0].write(found[1], data & 0xFF)
        self._log_access(port, data & 0xFF, BusAccessType.IO_WRITE)

# @intent:utility_function バスから n バイトの値をビッグエンディアン（正規バイト順）で読み込みます。
def read_be(bus: Bus, address: int, n: int) -> int:
    """Big-endian read. 各バイトのアドレスは16ビットでラップします。"""
    value = 0
    for i in range(n):
        value = (value << 8) | bus.read((address + i) & ADDRESS_MASK)
    return value

# @intent:utility_function バスへ n バイトの値をビッグエンディアン（正規バイト順）で書き込みます。
def write_be(bus: Bus, address: int, n: int, value: int) -> None:
    """Big-endian write."""
    for i in range(n):
        shift = 8 * (n - 1 - i)
        bus.write((address + i) & ADDRESS_MASK, (value >> shift) & 0xFF)

# @intent:utility_function ログを汚さないビッグエンディアン読み込み（逆アセンブラ用）。
def peek_be(bus: Bus, address: int, n: int) -> int:
    value = 0
    for i in range(n):
        value = (value << 8) | bus.peek((address + i) & ADDRESS_MASK)
    return value
