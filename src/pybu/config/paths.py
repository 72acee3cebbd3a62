"""Resolution of relative paths found in the configuration file."""

import os
from collections.abc import Iterable


def to_absolute_path(
    path: str,
    base_dir: str,
    use_search_path: bool = False,
    search_paths: Iterable[str] = (),
) -> str:
    """Convert a path to an absolute one if necessary.

    Relative paths are anchored at ``base_dir`` (the directory holding the
    configuration file). The result is a plain join, it is not normalized.

    Args:
        path: Path as written in the configuration
        base_dir: Absolute directory relative paths are anchored at
        use_search_path: Fall back to ``search_paths`` if the file is
            missing below ``base_dir``
        search_paths: Directories to scan, in order

    Returns:
        Absolute path. Existence is only checked for the search path fallback.
    """
    if os.path.isabs(path):
        return path

    resolved = os.path.join(base_dir, path)
    if use_search_path and not os.path.exists(resolved):
        for directory in search_paths:
            candidate = os.path.join(os.path.abspath(directory), path)
            if os.path.exists(candidate):
                return candidate

    return resolved
