import os
import yaml
from typing import Dict, Any
from .models import SystemConfig, CpuInitialState

SUPPORTED_ARCHITECTURES = ("LITTLE",)

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {}, os.path.dirname(os.path.abspath(path)))

    def load_from_string(self, text: str, base_dir: str = ".") -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {}, base_dir)

    def _parse_config(self, data: Dict[str, Any], base_dir: str) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")

        arch = str(data.get("architecture", "LITTLE")).upper()
        if arch not in SUPPORTED_ARCHITECTURES:
            raise ValueError(f"Unsupported architecture: {arch}")

        # プログラムのパスは設定ファイルの位置を基準にする
        program = data.get("program")
        if program is not None:
            program = str(program)
            if not os.path.isabs(program):
                program = os.path.join(base_dir, program)

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        registers = {}
        for name, value in (initial_state_data.get("registers") or {}).items():
            registers[name] = self._parse_int(value, f"initial_state.registers.{name}")
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0), "initial_state.pc"),
            sp=self._parse_int(initial_state_data.get("sp", 0), "initial_state.sp"),
            registers=registers,
        )

        return SystemConfig(
            architecture=arch,
            program=program,
            load_address=self._parse_int(data.get("load_address", 0), "load_address"),
            initial_state=initial_state,
        )

    def _parse_int(self, value: Any, field_name: str = "value") -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format for {field_name}: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip(), 0)
            except ValueError:
                pass
        raise ValueError(f"Invalid integer format for {field_name}: {value}")
