# little_machine/cli.py
"""
コマンドラインエントリポイント。

バイナリイメージまたはYAMLのシステム構成を読み込み、HALTまで実行します。
マシンの致命的エラーはここでだけ捕捉され、終了コード1で報告されます。
"""
import argparse
import logging
import sys
from typing import List, Optional

from little_machine import __version__
from little_machine.core.errors import MachineError
from little_machine.config.loader import ConfigLoader
from little_machine.config.builder import SystemBuilder
from little_machine.config.models import SystemConfig
from little_machine.diagnostics.dump import format_memory_dump, format_register_dump

logger = logging.getLogger(__name__)

def _int(text: str) -> int:
    return int(text, 0)

# @intent:utility_function "NAME=VALUE" 形式のレジスタ指定を解析します。
def _register_assignment(text: str):
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    try:
        return name.strip(), int(value.strip(), 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid register value in '{text}'") from None

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="little-machine", description="Little Machine 32-bit register machine emulator")
    parser.add_argument("image", help="flat binary image, or a YAML system configuration (.yaml/.yml)")
    parser.add_argument("--pc", type=_int, default=None, help="initial program counter")
    parser.add_argument("--sp", type=_int, default=None, help="initial stack pointer")
    parser.add_argument("-r", "--register", type=_register_assignment, action="append", default=[],
                        metavar="NAME=VALUE", help="set a register before running (repeatable)")
    parser.add_argument("--load-address", type=_int, default=None, help="address to load a binary image at")
    parser.add_argument("--max-steps", type=int, default=None, help="stop after this many instructions")
    parser.add_argument("--trace", action="store_true", help="log every executed instruction")
    parser.add_argument("--dump-before", action="store_true", help="print registers and memory before running")
    parser.add_argument("--dump-after", action="store_true", help="print registers and memory after running")
    parser.add_argument("--dump-length", type=_int, default=0x100, help="number of memory bytes to dump")
    parser.add_argument("--dump-offset", type=_int, default=0x0000, help="first memory address to dump")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser

# @intent:responsibility 引数から SystemConfig を組み立てます。コマンドラインの指定が設定ファイルより優先されます。
def load_config(args: argparse.Namespace) -> SystemConfig:
    if args.image.lower().endswith((".yaml", ".yml")):
        config = ConfigLoader().load_from_file(args.image)
    else:
        config = SystemConfig(program=args.image)

    if args.load_address is not None:
        config.load_address = args.load_address
    if args.pc is not None:
        config.initial_state.pc = args.pc
    if args.sp is not None:
        config.initial_state.sp = args.sp
    for name, value in args.register:
        config.initial_state.registers[name] = value
    return config

# コンソールデバイスは sys.stdout.buffer へ直接書くため、テキスト層をここでフラッシュする
def _dump(cpu, bus, args, title: str) -> None:
    print(f"--- {title} ---")
    print(format_register_dump(cpu))
    print(format_memory_dump(bus, args.dump_length, args.dump_offset), flush=True)

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # 1命令ごとのトレースはCPUのdebugレコード
    if args.trace:
        logging.getLogger("little_machine.core.cpu").setLevel(logging.DEBUG)

    try:
        cpu, bus = SystemBuilder().build_system(load_config(args))
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.dump_before:
        _dump(cpu, bus, args, "before")

    try:
        steps = cpu.run(args.max_steps)
    except MachineError as e:
        print(f"\nmachine error: {e}", file=sys.stderr)
        print(format_register_dump(cpu), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\ninterrupted", file=sys.stderr)
        return 130

    logger.info("Executed %d instructions (halted=%s)", steps, cpu.is_halted())
    if args.dump_after:
        _dump(cpu, bus, args, "after")
    return 0

if __name__ == '__main__':
    sys.exit(main())
