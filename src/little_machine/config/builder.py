import logging
from typing import Optional, Tuple

from little_machine.transport.bus import Bus, RAM, MEMORY_SIZE
from little_machine.transport.console import ConsoleDevice, CONSOLE_PORT
from little_machine.arch.little.cpu import LittleCpu
from little_machine.loader.loader import BinaryImageLoader
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig,
                     console: Optional[ConsoleDevice] = None) -> Tuple[LittleCpu, Bus]:
        """
        64KiBのRAMとポート0のコンソールを持つマシンを組み立て、プログラムをロードします。
        """
        bus = Bus()
        bus.register_device(0x0000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))
        bus.register_io_device(CONSOLE_PORT, CONSOLE_PORT, console or ConsoleDevice())

        if config.architecture != "LITTLE":
            raise ValueError(f"Unsupported architecture: {config.architecture}")
        cpu = LittleCpu(bus)

        if config.program:
            BinaryImageLoader().load_binary(config.program, bus, config.load_address)

        self.apply_initial_state(cpu, config.initial_state)
        return cpu, bus

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: LittleCpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、PC、SP、その他のレジスタを設定します。
        registers の指定はSPの指定より後に適用されます。
        """
        cpu.reset()
        cpu.set_pc(config_state.pc)
        cpu.set_register("sp", config_state.sp)
        for reg_name, value in config_state.registers.items():
            cpu.set_register(reg_name, value)
        logger.debug("Initial state applied: PC=%#06x SP=%#010x", config_state.pc, config_state.sp)
