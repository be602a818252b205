# little_machine/ui/app.py
"""
Qtアプリケーションのエントリポイント。
"""
import logging
import sys

from PySide6.QtWidgets import QApplication
from .main_window import MainWindow

# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main():
    """
    コマンドライン引数にバイナリイメージまたはYAML構成を渡すと、起動時にロードします。
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    main_win = MainWindow()
    if len(sys.argv) > 1:
        main_win.load_path(sys.argv[1])
    main_win.show()
    sys.exit(app.exec())

if __name__ == '__main__':
    main()
