# tests/config/test_config.py
"""
YAML構成ファイルの読み込みと、構成からのシステム組み立てを検証します。
"""
import io

import pytest

from little_machine.config.loader import ConfigLoader
from little_machine.config.builder import SystemBuilder
from little_machine.config.models import SystemConfig, CpuInitialState
from little_machine.transport.console import ConsoleDevice
from little_machine.arch.little.cpu import LittleCpu
from little_machine.arch.little.decoder import encode
from little_machine.arch.little.isa import Opcode, Syscall, AddressingMode as M, register_index as r

CONFIG_YAML = """
architecture: little
program: hello.bin
load_address: 0x0100
initial_state:
  pc: 0x0100
  sp: "0x8000"
  registers:
    t0: 42
    A1: "0x41"
"""

class TestConfigLoader:
    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "machine.yaml"
        config_file.write_text(CONFIG_YAML)

        config = ConfigLoader().load_from_file(str(config_file))

        assert config.architecture == "LITTLE"
        assert config.program == str(tmp_path / "hello.bin")
        assert config.load_address == 0x0100
        assert config.initial_state.pc == 0x0100
        assert config.initial_state.sp == 0x8000
        assert config.initial_state.registers == {"t0": 42, "A1": 0x41}

    def test_defaults(self):
        config = ConfigLoader().load_from_string("")
        assert config == SystemConfig()

    def test_absolute_program_path_is_kept(self, tmp_path):
        program = str(tmp_path / "abs.bin")
        config = ConfigLoader().load_from_string(f"program: {program}\n", base_dir="/elsewhere")
        assert config.program == program

    def test_unsupported_architecture(self):
        with pytest.raises(ValueError, match="Unsupported architecture"):
            ConfigLoader().load_from_string("architecture: Z80\n")

    @pytest.mark.parametrize("text", [
        "initial_state:\n  pc: zzz\n",
        "initial_state:\n  sp: true\n",
        "load_address: [1, 2]\n",
    ])
    def test_invalid_integers(self, text):
        with pytest.raises(ValueError, match="Invalid integer format"):
            ConfigLoader().load_from_string(text)

    def test_root_must_be_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            ConfigLoader().load_from_string("- 1\n- 2\n")

class TestSystemBuilder:
    # @intent:test_case_build 構成ファイルから組み立てたマシンでプログラムが実行できることを検証します。
    def test_build_and_run(self, tmp_path):
        program = encode(Opcode.MOV, M.IMMEDIATE, M.REGISTER, 0, r("a0")) + Syscall.WRITE_CHAR.to_bytes(4, "big")
        program += encode(Opcode.INTERRUPT, dst_mode=M.IMMEDIATE) + bytes(4)
        program += encode(Opcode.HLT)
        (tmp_path / "hello.bin").write_bytes(program)
        config_file = tmp_path / "machine.yaml"
        config_file.write_text(CONFIG_YAML)

        output = io.BytesIO()
        config = ConfigLoader().load_from_file(str(config_file))
        cpu, bus = SystemBuilder().build_system(config, ConsoleDevice(io.BytesIO(), output))

        assert isinstance(cpu, LittleCpu)
        assert cpu.get_state().pc == 0x0100
        assert cpu.get_register_map()["SP"] == 0x8000
        assert cpu.get_register_map()["T0"] == 42
        assert bus.peek(0x0100) == program[0]

        cpu.run()
        assert output.getvalue() == b"A"
        assert cpu.is_halted()

    def test_build_without_program(self):
        cpu, bus = SystemBuilder().build_system(SystemConfig())
        assert cpu.get_state().pc == 0
        assert bus.peek(0xFFFF) == 0
        assert bus.read_io(0x01) == 0

    def test_registers_override_sp(self):
        config = SystemConfig(initial_state=CpuInitialState(sp=0x8000, registers={"sp": 0x9000}))
        cpu, _ = SystemBuilder().build_system(config)
        assert cpu.get_register_map()["SP"] == 0x9000

    def test_apply_initial_state_resets_cpu(self):
        cpu, _ = SystemBuilder().build_system(SystemConfig())
        cpu.set_register("t5", 9)
        cpu.get_state().halted = True
        SystemBuilder().apply_initial_state(cpu, CpuInitialState(pc=0x10))
        assert cpu.get_state().pc == 0x10
        assert not cpu.is_halted()
        assert cpu.get_register_map()["T5"] == 0
