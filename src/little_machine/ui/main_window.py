# little_machine/ui/main_window.py
"""
メインウィンドウの実装。
アプリケーションの主要なUIコンポーネントを保持し、レイアウトを管理します。
"""
import logging
import sys
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QApplication, QDockWidget, QTabWidget, QToolBar, QLabel, QFileDialog, QMessageBox,
)
from PySide6.QtGui import QPalette, QColor, QAction, QCloseEvent
from PySide6.QtCore import Qt, QThread, Signal, Slot

from little_machine.core.errors import MachineError
from little_machine.config.loader import ConfigLoader
from little_machine.config.builder import SystemBuilder
from little_machine.config.models import SystemConfig
from little_machine.debugger.debugger import Debugger
from little_machine.transport.console import ConsoleDevice
from .register_view import RegisterView
from .flag_view import FlagView
from .hex_view import HexView
from .code_view import CodeView
from .console_view import ConsoleStream, ConsoleView
from .fonts import get_monospace_font_family

logger = logging.getLogger(__name__)

# @intent:responsibility デバッガのrunメソッドをバックグラウンドで実行します。
class DebuggerThread(QThread):
    """
    run() はHALT、ブレークポイント、stop() のいずれかで戻ります。
    マシンの致命的エラーは machine_error で通知されます。
    """
    run_finished = Signal(object)
    machine_error = Signal(str)

    def __init__(self, debugger: Debugger, backwards: bool = False):
        super().__init__()
        self.debugger = debugger
        self.backwards = backwards

    def run(self):
        try:
            if self.backwards:
                self.debugger.run_back()
            else:
                self.debugger.run()
        except MachineError as e:
            self.machine_error.emit(str(e))
        self.run_finished.emit(self.debugger.get_last_snapshot())

# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, parent=None):
        super(MainWindow, self).__init__(parent)
        self.setWindowTitle("Little Machine")
        self.setGeometry(100, 100, 1200, 800)
        self.setDockNestingEnabled(True)

        self.console_stream = ConsoleStream(self)
        self.config = SystemConfig()
        self.debugger_thread: Optional[DebuggerThread] = None

        self._set_dark_theme()
        self._create_toolbar()
        self._create_navigation_pane()
        self._create_status_inspector()
        self._create_menus()
        self._build_backend()
        self._update_ui_state(False)

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_action = QAction("Open Image or Config...", self)
        self.load_action.setShortcut("Ctrl+O")
        self.load_action.triggered.connect(self._open_file)
        file_menu.addAction(self.load_action)

        self.status_label = QLabel("Welcome to Little Machine", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.setCentralWidget(self.status_label)

    # @intent:responsibility 現在の構成からバス・CPU・デバッガを作り直し、表示を初期化します。
    def _build_backend(self):
        self.console_stream.reset()
        console = ConsoleDevice(self.console_stream, self.console_stream)
        self.cpu, self.bus = SystemBuilder().build_system(self.config, console)
        self.debugger = Debugger(self.cpu)
        self.register_view.set_cpu(self.cpu)
        self.flag_view.set_cpu(self.cpu)
        self.code_view.reset_cache()
        self._refresh_views()

    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self._run_debugger)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self._stop_debugger)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step_debugger)
        toolbar.addAction(self.step_action)

        self.step_back_action = QAction("Step Back", self)
        self.step_back_action.triggered.connect(self._step_back_debugger)
        toolbar.addAction(self.step_back_action)

        self.run_back_action = QAction("Run Back", self)
        self.run_back_action.triggered.connect(self._run_back_debugger)
        toolbar.addAction(self.run_back_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self._reset_machine)
        toolbar.addAction(self.reset_action)

    # @intent:responsibility 実行状態に応じてUIコンポーネントの有効/無効を切り替えます。
    def _update_ui_state(self, is_running: bool):
        for action in (self.load_action, self.run_action, self.step_action,
                       self.step_back_action, self.run_back_action, self.reset_action):
            action.setEnabled(not is_running)
        self.stop_action.setEnabled(is_running)

    def _start_thread(self, backwards: bool):
        self.console_stream.resume_input()
        self._update_ui_state(True)
        self.status_label.setText("Running backwards..." if backwards else "Running...")
        self.debugger_thread = DebuggerThread(self.debugger, backwards)
        self.debugger_thread.run_finished.connect(self._on_run_finished)
        self.debugger_thread.machine_error.connect(self._show_machine_error)
        self.debugger_thread.start()

    @Slot()
    def _run_debugger(self):
        self._start_thread(backwards=False)

    @Slot()
    def _run_back_debugger(self):
        self._start_thread(backwards=True)

    @Slot()
    def _stop_debugger(self):
        self.status_label.setText("Stopping...")
        self.debugger.stop()
        self.console_stream.cancel_read()

    @Slot()
    def _step_debugger(self):
        try:
            self.debugger.step_instruction()
        except MachineError as e:
            self._show_machine_error(str(e))
        self._refresh_views()

    @Slot()
    def _step_back_debugger(self):
        self.debugger.step_back()
        self._refresh_views()

    @Slot()
    def _reset_machine(self):
        self.console_view.clear()
        self._build_backend()

    @Slot(object)
    def _on_run_finished(self, snapshot):
        self._update_ui_state(False)
        self._refresh_views()

    @Slot(str)
    def _show_machine_error(self, message: str):
        logger.error("Machine error: %s", message)
        QMessageBox.critical(self, "Machine Error", message)

    # @intent:responsibility CPUとバスの現在の状態で全ビューを更新します。
    def _refresh_views(self):
        pc = self.cpu.get_state().pc
        self.register_view.update_registers()
        self.flag_view.update_flags()
        self.hex_view.update_memory(self.bus, highlight_address=pc)
        self.code_view.update_code(self.cpu, pc)
        state = "HALTED" if self.cpu.is_halted() else "Stopped"
        self.status_label.setText(
            f"{state}  PC={pc:04X}  instructions={self.cpu.get_instruction_count()}"
        )

    # @intent:responsibility バイナリイメージ、またはYAMLの構成ファイルをロードします。
    def load_path(self, path: str) -> None:
        if path.lower().endswith((".yaml", ".yml")):
            self.config = ConfigLoader().load_from_file(path)
        else:
            self.config = SystemConfig(program=path)
        self.console_view.clear()
        self._build_backend()
        self.setWindowTitle(f"Little Machine - {path}")

    @Slot()
    def _open_file(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open Program", "", "Images and Configs (*.bin *.yaml *.yml);;All Files (*)"
        )
        if not file_name:
            return
        try:
            self.load_path(file_name)
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Failed to load {file_name}: {e}")

    def _create_navigation_pane(self):
        nav_dock = QDockWidget("Navigation", self)
        nav_dock.setAllowedAreas(Qt.LeftDockWidgetArea)
        tab_widget = QTabWidget()
        self.code_view = CodeView()
        tab_widget.addTab(self.code_view, "Disassembly")
        self.hex_view = HexView()
        tab_widget.addTab(self.hex_view, "HEX View")
        self.console_view = ConsoleView(self.console_stream)
        tab_widget.addTab(self.console_view, "Console")
        nav_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.LeftDockWidgetArea, nav_dock)

    def _create_status_inspector(self):
        status_dock = QDockWidget("Status Inspector", self)
        status_dock.setAllowedAreas(Qt.RightDockWidgetArea)
        tab_widget = QTabWidget()
        self.register_view = RegisterView()
        tab_widget.addTab(self.register_view, "Registers")
        self.flag_view = FlagView()
        tab_widget.addTab(self.flag_view, "Flags")
        status_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.RightDockWidgetArea, status_dock)

    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        dark_palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
            QTabWidget::pane {{ border-top: 2px solid #2A82DA; }}
            QTabBar::tab {{ background: #1E1E1E; padding: 8px 12px; min-width: 80px; }}
            QTabBar::tab:selected {{ background: #101010; border: 1px solid #2A82DA; }}
        """)

    # @intent:responsibility 終了時にバックグラウンドスレッドを停止します。
    def closeEvent(self, event: QCloseEvent):
        """
        コンソール入力待ちでブロックしている場合に備え、入力をEOFにしてから待機します。
        """
        if self.debugger_thread is not None and self.debugger_thread.isRunning():
            try:
                self.debugger_thread.run_finished.disconnect(self._on_run_finished)
            except RuntimeError:
                pass
            self.debugger.stop()
            self.console_stream.close_input()
            self.debugger_thread.wait()
        event.accept()

if __name__ == '__main__':
    app = QApplication(sys.argv)
    main_win = MainWindow()
    main_win.show()
    sys.exit(app.exec())
