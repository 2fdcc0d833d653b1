"""gitdeps - 基于 Git 标签的依赖包解析与安装引擎"""

__version__ = "0.3.0"
