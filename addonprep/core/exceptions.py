"""统一异常体系

所有业务异常继承 AddonPrepError，替代散落的 ValueError / RuntimeError。
CLI 层可据此输出友好提示，流水线可据此标注失败阶段。

分类:
  - 环境类: ToolMissingError
  - 网络/瞬时类: TransientError（可重试）
  - 校验类: VerificationError（操作报告成功但产物缺失，不重试）
  - 输入漂移类: AnchorNotFoundError / MarkerNotFoundError
  - 结构类: UnbalancedStructureError
"""

from __future__ import annotations


class AddonPrepError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(AddonPrepError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(AddonPrepError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ToolMissingError(AddonPrepError):
    """运行环境缺少必要工具（如 git）"""

    code = "TOOL_MISSING"


class TransientError(AddonPrepError):
    """网络或瞬时故障，可按重试策略重试"""

    code = "TRANSIENT_ERROR"


class BootstrapError(AddonPrepError):
    """包管理器自举失败"""

    code = "BOOTSTRAP_FAILED"


class BootstrapExhaustedError(BootstrapError):
    """所有镜像的所有重试均失败"""

    code = "BOOTSTRAP_EXHAUSTED"

    def __init__(self, message: str, last_error: Exception | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error


class VerificationError(AddonPrepError):
    """操作报告成功，但预期产物不存在"""

    code = "VERIFICATION_FAILED"


class DependencyError(AddonPrepError):
    """依赖包安装或移除失败"""

    code = "DEPENDENCY_ERROR"


class ArchiveMissingError(AddonPrepError):
    """下载缓存中找不到源码包"""

    code = "ARCHIVE_MISSING"


class ExtractionError(AddonPrepError):
    """源码包解压失败"""

    code = "EXTRACTION_FAILED"


class PatchError(AddonPrepError):
    """源码补丁失败，携带文件与操作名"""

    code = "PATCH_ERROR"

    def __init__(self, message: str, *, path: str = "", operation: str = "") -> None:
        super().__init__(message)
        self.path = path
        self.operation = operation


class AnchorNotFoundError(PatchError):
    """函数签名（锚点）不存在"""

    code = "ANCHOR_NOT_FOUND"


class MarkerNotFoundError(PatchError):
    """插入标记不存在"""

    code = "MARKER_NOT_FOUND"


class UnbalancedStructureError(PatchError):
    """扫描到缓冲区末尾仍未找到匹配的闭合括号"""

    code = "UNBALANCED_STRUCTURE"


class PipelineError(AddonPrepError):
    """流水线某阶段失败，携带阶段名与原始异常"""

    code = "PIPELINE_ERROR"

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"{stage} 失败: {cause}")
        self.stage = stage
        self.cause = cause
