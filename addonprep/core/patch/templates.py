"""生成文件模板: config.h / ffmpeg_run() / binding.c"""

from __future__ import annotations

NAPI_INCLUDE = "\n#include <node_api.h>"

# 平台相关的特性开关
_WINDOWS_FLAGS: list[tuple[str, int]] = [
    ("HAVE_IO_H", 1),
    ("HAVE_UNISTD_H", 0),
    ("HAVE_SYS_RESOURCE_H", 0),
    ("HAVE_GETPROCESSTIMES", 1),
    ("HAVE_GETPROCESSMEMORYINFO", 1),
    ("HAVE_SETCONSOLECTRLHANDLER", 1),
    ("HAVE_SYS_SELECT_H", 0),
    ("HAVE_TERMIOS_H", 0),
    ("HAVE_KBHIT", 1),
    ("HAVE_PEEKNAMEDPIPE", 1),
    ("HAVE_GETSTDHANDLE", 1),
    ("HAVE_GETRUSAGE", 0),
    ("HAVE_PTHREADS", 0),
    ("HAVE_W32THREADS", 1),
]

_POSIX_FLAGS: list[tuple[str, int]] = [
    ("HAVE_IO_H", 0),
    ("HAVE_UNISTD_H", 1),
    ("HAVE_SYS_RESOURCE_H", 1),
    ("HAVE_GETPROCESSTIMES", 0),
    ("HAVE_GETPROCESSMEMORYINFO", 0),
    ("HAVE_SETCONSOLECTRLHANDLER", 0),
    ("HAVE_SYS_SELECT_H", 1),
    ("HAVE_TERMIOS_H", 1),
    ("HAVE_KBHIT", 0),
    ("HAVE_PEEKNAMEDPIPE", 0),
    ("HAVE_GETSTDHANDLE", 0),
    ("HAVE_GETRUSAGE", 1),
    ("HAVE_PTHREADS", 1),
    ("HAVE_W32THREADS", 0),
]

_COMPONENT_FLAGS: list[tuple[str, int]] = [
    ("CONFIG_AVUTIL", 1),
    ("CONFIG_AVCODEC", 1),
    ("CONFIG_AVFORMAT", 1),
    ("CONFIG_AVDEVICE", 1),
    ("CONFIG_AVFILTER", 1),
    ("CONFIG_SWSCALE", 1),
    ("CONFIG_SWRESAMPLE", 1),
    ("CONFIG_POSTPROC", 0),
]


def _arch_flags(triplet: str) -> list[tuple[str, int]]:
    arch = triplet.split("-", 1)[0]
    return [
        ("ARCH_X86_32", int(arch == "x86")),
        ("ARCH_X86_64", int(arch == "x64")),
        ("ARCH_AARCH64", int(arch == "arm64")),
    ]


def _defines(flags: list[tuple[str, int]]) -> str:
    return "\n".join(f"#define {name} {value}" for name, value in flags)


def render_config_h(platform: str, triplet: str, year: int) -> str:
    """生成 ffmpeg 编译所需的 config.h"""
    windows = platform == "windows"
    os_flags = _WINDOWS_FLAGS if windows else _POSIX_FLAGS
    label = "Windows" if windows else platform.capitalize()
    compiler = "MSVC" if windows else "GCC/Clang"
    # MSVC 以内建函数提供 lrint，其余平台由 libm 提供
    return f"""/* config.h - Generated for {label} build ({triplet}) */
#ifndef CONFIG_H
#define CONFIG_H

/* Platform specific defines */
{_defines(os_flags)}

/* FFmpeg components */
{_defines(_COMPONENT_FLAGS)}

/* Architecture */
{_defines(_arch_flags(triplet))}

/* Endianness */
#define HAVE_BIGENDIAN 0

/* Math functions */
#define HAVE_LRINT 1
#define HAVE_LRINTF 1

/* FFmpeg data directory - empty for Node.js addon */
#define FFMPEG_DATADIR ""
#define AVCONV_DATADIR ""

/* Build configuration */
#define CONFIG_THIS_YEAR {year}
#define FFMPEG_CONFIGURATION "{label} build for Node.js addon"
#define CC_IDENT "{compiler}"
#define FFMPEG_VERSION "N/A"

#endif /* CONFIG_H */
"""


FFMPEG_RUN_SIGNATURE = "napi_value ffmpeg_run"

FFMPEG_RUN_FUNCTION = r"""
/**
 * Run ffmpeg with arguments (N-API function for Node.js addon)
 * This function replaces the main() function for use in Node.js addon
 */
static void ffmpeg_run_free_args(char **str_storage, char **argv_ptr, int count)
{
    for (int i = 0; i < count; i++) {
        if (str_storage[i])
            av_free(str_storage[i]);
    }
    av_free(str_storage);
    av_free(argv_ptr);
}

napi_value ffmpeg_run(napi_env env, napi_callback_info info)
{
    napi_status status;
    size_t argc = 1;
    napi_value argv[1];
    napi_value result;
    Scheduler *sch = NULL;
    int ret;
    BenchmarkTimeStamps ti;

    status = napi_get_cb_info(env, info, &argc, argv, NULL, NULL);
    if (status != napi_ok) {
        napi_throw_error(env, NULL, "Failed to get callback info");
        return NULL;
    }

    bool is_array = false;
    if (argc < 1 || napi_is_array(env, argv[0], &is_array) != napi_ok || !is_array) {
        napi_throw_type_error(env, NULL, "Expected an array of arguments");
        return NULL;
    }

    uint32_t array_length;
    status = napi_get_array_length(env, argv[0], &array_length);
    if (status != napi_ok) {
        napi_throw_error(env, NULL, "Failed to get array length");
        return NULL;
    }

    /* argv[0] is the program name */
    int total_args = (int)array_length + 1;
    char **argv_ptr = (char **)av_mallocz(sizeof(char *) * total_args);
    char **str_storage = (char **)av_mallocz(sizeof(char *) * total_args);
    if (!argv_ptr || !str_storage) {
        av_free(str_storage);
        av_free(argv_ptr);
        napi_throw_error(env, NULL, "Failed to allocate memory");
        return NULL;
    }
    argv_ptr[0] = "ffmpeg";

    for (uint32_t i = 0; i < array_length; i++) {
        napi_value element;
        size_t str_len, copied;

        status = napi_get_element(env, argv[0], i, &element);
        if (status != napi_ok) {
            ffmpeg_run_free_args(str_storage, argv_ptr, total_args);
            napi_throw_error(env, NULL, "Failed to get array element");
            return NULL;
        }

        status = napi_get_value_string_utf8(env, element, NULL, 0, &str_len);
        if (status != napi_ok) {
            ffmpeg_run_free_args(str_storage, argv_ptr, total_args);
            napi_throw_type_error(env, NULL, "Array element must be a string");
            return NULL;
        }

        str_storage[i + 1] = (char *)av_mallocz(str_len + 1);
        if (!str_storage[i + 1]) {
            ffmpeg_run_free_args(str_storage, argv_ptr, total_args);
            napi_throw_error(env, NULL, "Failed to allocate memory for string");
            return NULL;
        }

        status = napi_get_value_string_utf8(env, element, str_storage[i + 1], str_len + 1, &copied);
        if (status != napi_ok) {
            ffmpeg_run_free_args(str_storage, argv_ptr, total_args);
            napi_throw_error(env, NULL, "Failed to get string value");
            return NULL;
        }
        argv_ptr[i + 1] = str_storage[i + 1];
    }

    init_dynload();

    setvbuf(stderr, NULL, _IONBF, 0);

    av_log_set_flags(AV_LOG_SKIP_REPEATED);
    parse_loglevel(total_args, argv_ptr, options);

#if CONFIG_AVDEVICE
    avdevice_register_all();
#endif
    avformat_network_init();

    sch = sch_alloc();
    if (!sch) {
        ret = AVERROR(ENOMEM);
        goto finish;
    }

    ret = ffmpeg_parse_options(total_args, argv_ptr, sch);
    if (ret < 0)
        goto finish;

    if (nb_output_files <= 0 && nb_input_files == 0) {
        av_log(NULL, AV_LOG_WARNING, "No input or output files specified\n");
        ret = 1;
        goto finish;
    }

    if (nb_output_files <= 0) {
        av_log(NULL, AV_LOG_FATAL, "At least one output file must be specified\n");
        ret = 1;
        goto finish;
    }

    current_time = ti = get_benchmark_time_stamps();
    ret = transcode(sch);
    if (ret >= 0 && do_benchmark) {
        int64_t utime, stime, rtime;
        current_time = get_benchmark_time_stamps();
        utime = current_time.user_usec - ti.user_usec;
        stime = current_time.sys_usec  - ti.sys_usec;
        rtime = current_time.real_usec - ti.real_usec;
        av_log(NULL, AV_LOG_INFO,
               "bench: utime=%0.3fs stime=%0.3fs rtime=%0.3fs\n",
               utime / 1000000.0, stime / 1000000.0, rtime / 1000000.0);
    }

    ret = received_nb_signals                 ? 255 :
          (ret == FFMPEG_ERROR_RATE_EXCEEDED) ?  69 : ret;

finish:
    if (ret == AVERROR_EXIT)
        ret = 0;

    ffmpeg_cleanup(ret);
    sch_free(&sch);
    ffmpeg_run_free_args(str_storage, argv_ptr, total_args);

    status = napi_create_int32(env, ret, &result);
    if (status != napi_ok)
        return NULL;
    return result;
}
"""

BINDING_C = """#include <node_api.h>
#include <libavformat/avformat.h>

/* Defined in the patched ffmpeg.c */
extern napi_value ffmpeg_run(napi_env env, napi_callback_info info);

static void addon_cleanup(void *arg)
{
    (void)arg;
    avformat_network_deinit();
}

napi_value Init(napi_env env, napi_value exports)
{
    napi_status status;
    napi_value fn;

    status = napi_create_function(env, NULL, 0, ffmpeg_run, NULL, &fn);
    if (status != napi_ok)
        return NULL;

    status = napi_set_named_property(env, exports, "run", fn);
    if (status != napi_ok)
        return NULL;

    status = napi_add_env_cleanup_hook(env, addon_cleanup, NULL);
    if (status != napi_ok)
        return NULL;

    return exports;
}

NAPI_MODULE(NODE_GYP_MODULE_NAME, Init)
"""
