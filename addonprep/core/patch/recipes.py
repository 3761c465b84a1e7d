"""FFmpeg 源码补丁清单

操作顺序固定: 后续操作的锚点依赖前面操作留下的文本。
ffmpeg_run() 插在 main() 的删除注释之后，因此必须排在删除操作之后。
"""

from __future__ import annotations

from addonprep.core.patch.operations import (
    InsertAfterMarker,
    PatchOperation,
    RemoveFunction,
    ReplaceText,
    removal_comment,
    visibility_change,
)
from addonprep.core.patch.templates import (
    FFMPEG_RUN_FUNCTION,
    FFMPEG_RUN_SIGNATURE,
    NAPI_INCLUDE,
)

MAIN_SIGNATURE = "int main(int argc, char **argv)"
MAIN_REMOVED_COMMENT = removal_comment("Main", "ffmpeg_run", "Node.js addon")
UTILS_INCLUDE = '#include "ffmpeg_utils.h"'

POSTPROC_LINE = "    PRINT_LIB_INFO(postproc,   POSTPROC,   flags, level);"
POSTPROC_GUARD = "#if CONFIG_POSTPROC\n"


def ffmpeg_c_operations() -> list[PatchOperation]:
    """fftools/ffmpeg.c: 导出 transcode/ffmpeg_cleanup，以 ffmpeg_run 取代 main"""
    return [
        visibility_change("export-transcode", "static int transcode(Scheduler *sch)"),
        visibility_change("export-cleanup", "static void ffmpeg_cleanup(int ret)"),
        RemoveFunction("remove-main", MAIN_SIGNATURE, MAIN_REMOVED_COMMENT),
        InsertAfterMarker(
            "include-node-api", UTILS_INCLUDE, NAPI_INCLUDE, "#include <node_api.h>",
        ),
        InsertAfterMarker(
            "add-ffmpeg-run", MAIN_REMOVED_COMMENT, FFMPEG_RUN_FUNCTION,
            FFMPEG_RUN_SIGNATURE,
        ),
    ]


def opt_common_operations() -> list[PatchOperation]:
    """fftools/opt_common.c: postproc 库信息改为条件编译"""
    return [
        ReplaceText(
            "guard-postproc",
            POSTPROC_LINE,
            f"{POSTPROC_GUARD}{POSTPROC_LINE}\n#endif",
            applied_marker=f"{POSTPROC_GUARD}{POSTPROC_LINE}",
        ),
    ]
