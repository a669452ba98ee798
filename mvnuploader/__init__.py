"""mvnuploader - Maven 多模块依赖私仓预检查与上传工具"""

__version__ = "0.3.0"
