"""
Little Machine アーキテクチャ（24ビット固定長命令・32レジスタ）の実装パッケージ。
"""
from .cpu import LittleCpu

__all__ = ["LittleCpu"]
