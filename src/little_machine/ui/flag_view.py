# little_machine/ui/flag_view.py
"""
CPUのフラグを表示する汎用ウィジェット。
"""
from typing import Dict, Optional

from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel
from PySide6.QtCore import Qt

from little_machine.core.cpu import AbstractCpu
from little_machine.ui.fonts import get_monospace_font_family

# @intent:responsibility CPUのフラグ状態を表示する汎用UIウィジェットを提供します。
class FlagView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")
        self.layout = QHBoxLayout(self)
        self.layout.setContentsMargins(10, 10, 10, 10)
        self.layout.setSpacing(15)

        self._font_family = get_monospace_font_family()
        self._flag_labels: Dict[str, QLabel] = {}
        self._cpu: Optional[AbstractCpu] = None

    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._setup_flag_labels()

    # @intent:responsibility get_flag_state のキーからフラグのラベルを作成します。
    def _setup_flag_labels(self):
        while self.layout.count():
            item = self.layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._flag_labels.clear()

        for flag_name in self._cpu.get_flag_state().keys():
            label_name = QLabel(f"{flag_name}:")
            label_name.setStyleSheet("font-weight: bold; color: #BBBBBB;")

            label_value = QLabel("0")
            label_value.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: #FFD700;")
            label_value.setFixedWidth(15)
            label_value.setAlignment(Qt.AlignCenter)

            self.layout.addWidget(label_name)
            self.layout.addWidget(label_value)
            self._flag_labels[flag_name] = label_value

        self.layout.addStretch(1)

    def update_flags(self):
        if not self._cpu:
            return
        for name, is_set in self._cpu.get_flag_state().items():
            if name in self._flag_labels:
                self._flag_labels[name].setText("1" if is_set else "0")

    def value_text(self, name: str) -> str:
        return self._flag_labels[name].text()
