from dataclasses import dataclass, field
from typing import Dict, Optional, Union

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0x0000
    registers: Dict[Union[str, int], int] = field(default_factory=dict)

@dataclass
class SystemConfig:
    architecture: str = "LITTLE"
    program: Optional[str] = None  # 設定ファイルからの相対パスは解決済み
    load_address: int = 0x0000
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
