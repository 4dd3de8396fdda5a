"""RT Inspector - DICOM RT 文件元数据查看器"""

__version__ = "1.0.0"
