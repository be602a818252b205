"""
Little Machine: 32ビット・レジスタマシンのエミュレータとトレーサ。
"""
__version__ = "0.1.0"
