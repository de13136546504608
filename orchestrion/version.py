"""Release tag and build information."""

from __future__ import annotations

TAG = "v1.1.0"
DEV_SUFFIX = "+devel"


def resolve_build_info(main_version: str, replace_version: str | None = None) -> tuple[str, bool]:
    """Work out the build version and whether this is a development build.

    ``main_version`` is the version recorded for the main module, and
    ``replace_version`` the version of its replacement, if it is replaced.
    """
    version = main_version if replace_version is None else replace_version
    if version in ("", "(devel)"):
        return TAG + DEV_SUFFIX, True
    return main_version, False


# No release metadata is stamped into this package, so it always reports
# itself as a development build of the static tag.
_BUILD_VERSION, _IS_DEV = resolve_build_info("")


def tag() -> str:
    """Return the version tag for this build."""
    return _BUILD_VERSION or TAG


def tag_info() -> tuple[str, bool]:
    """Return the static tag and whether this is a development build."""
    return TAG, _IS_DEV