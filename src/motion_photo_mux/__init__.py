"""Live Photo 轉 Motion Photo 工具。"""

__version__ = "0.1.0"
