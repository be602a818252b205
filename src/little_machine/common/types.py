"""
共通の型定義を提供するモジュール。
CPU、ダンプ、UIなど複数のレイヤーで使用される表示用の型を定義します。
"""
from typing import List, NamedTuple

# @intent:data_structure 単一のレジスタの表示定義。UIやダンプが動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (16 or 32)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "Special", "Temporaries"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
