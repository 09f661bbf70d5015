"""Constants shared by configuration and the request pipeline."""

__all__ = (
    "AUTO_REBUILD_FLAG",
    "DEBUG_FLAG",
    "DEFAULT_PAGE",
    "DESCRIPTOR_SUFFIX",
    "DEV_SERVER_APPLICATION_NAME",
    "DIST_DIR_NAME",
    "FRAMEWORK_PATH_PREFIX",
    "OCTET_STREAM",
    "TRUE_VALUES",
    "WASM_MEDIA_TYPE",
    "WEB_ROOT_DIR_NAME",
)

TRUE_VALUES = {"True", "true", "1", "yes", "Y", "T"}

DESCRIPTOR_SUFFIX = ".blazor.config"
AUTO_REBUILD_FLAG = "autorebuild:true"
DEBUG_FLAG = "debug:true"
DIST_DIR_NAME = "dist"
WEB_ROOT_DIR_NAME = "wwwroot"

DEV_SERVER_APPLICATION_NAME = "litestar-blazor"
"""Process name of the standalone dev server (see ``litestar_blazor.cli``)."""

FRAMEWORK_PATH_PREFIX = "/_framework"
DEFAULT_PAGE = "index.html"

OCTET_STREAM = "application/octet-stream"
WASM_MEDIA_TYPE = "application/wasm"
