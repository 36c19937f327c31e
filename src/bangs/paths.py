from collections.abc import Iterable
from pathlib import Path


def plugin_dirs(base_dirs: Iterable[str | Path], name: str) -> list[Path]:
    """Return the directory of plugin ``name`` inside each base dir."""
    return [Path(base).expanduser() / name for base in base_dirs]


def local_plugin_dir(base_dirs: Iterable[str | Path], name: str) -> Path:
    """Return the user's own plugin directory, the last of ``base_dirs``."""
    dirs = plugin_dirs(base_dirs, name)
    if not dirs:
        msg = "no plugin directories configured"
        raise ValueError(msg)
    return dirs[-1]


def find_database_files(
    base_dirs: Iterable[str | Path],
    name: str,
    filename: str,
) -> list[Path]:
    """Find existing database files, lowest precedence first."""
    return [
        path
        for path in (directory / filename for directory in plugin_dirs(base_dirs, name))
        if path.is_file()
    ]
