"""depsync - 将依赖包的子依赖按已解析版本同步为顶层依赖"""

__version__ = "0.1.0"
