"""Path helpers."""

from __future__ import annotations

import os

_SEPARATORS = os.sep + (os.altsep or "")


def get_absolute_path(path: str) -> str:
    """Return the cleaned absolute form of ``path``."""
    return os.path.abspath(path)


def _join_with_cwd(filename: str) -> str:
    return os.path.normpath(os.path.join(os.getcwd(), filename))


def _dir(path: str) -> str:
    directory = os.path.dirname(path)
    return os.path.normpath(directory) if directory else "."


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip(_SEPARATORS)
    if not stripped:
        return os.sep
    for separator in _SEPARATORS:
        stripped = stripped.rsplit(separator, 1)[-1]
    return stripped


def resolve_relative_path_to_absolute(filename: str) -> str:
    """Return absolute paths unchanged; join relative ones onto the working directory."""
    if os.path.isabs(filename):
        return filename
    return _join_with_cwd(filename)


def get_absolute_path_dir(filename: str) -> str:
    """Return the directory of ``filename``, made absolute against the working directory."""
    if os.path.isabs(filename):
        return _dir(filename)
    return _dir(_join_with_cwd(filename))


def get_file_name_and_type(file_path: str) -> tuple[str, str]:
    """Split the last path element into its name and its extension without the dot."""
    base = _base(file_path)
    dot = base.rfind(".")
    file_type = base[dot + 1:] if dot >= 0 else ""
    file_name = base.removesuffix(file_type).removesuffix(".")
    return file_name, file_type


def is_simple_file_name(file_name: str) -> bool:
    """Tell whether the name has no directory part."""
    return "/" not in file_name


def file_exists(filename: str) -> bool:
    """Tell whether the path exists; errors other than non-existence count as existing."""
    try:
        os.stat(filename)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True