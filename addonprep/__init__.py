"""addonprep - FFmpeg Node.js 原生插件源码准备工具"""

__version__ = "0.1.0"
