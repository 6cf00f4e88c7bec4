import hashlib
import os
from pathlib import Path
from typing import Optional, Union


def resolve_base_dir(
    cli_arg: Optional[str] = None,
    config_val: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None
) -> Path:
    """
    Resolves the absolute workspace root.

    Priority:
    1. CLI argument (--dir)
    2. Config value
    3. Current working directory (cwd)
    """
    path_str = cli_arg or config_val

    if path_str:
        target = Path(path_str).expanduser().resolve()
    else:
        target = Path(cwd or os.getcwd()).resolve()

    return target


def is_safe_path(base_dir: Path, target_path: Path, allow_root: bool = True) -> bool:
    """
    Verifies that target_path is inside base_dir (or is base_dir itself
    when allow_root). Both sides are resolved, so `..` segments and
    symlinks pointing outside are caught.
    """
    base = Path(base_dir).resolve()
    target = Path(target_path).resolve()
    if target == base:
        return allow_root
    try:
        target.relative_to(base)
    except ValueError:
        return False
    return True


def workspace_key(root: Union[str, Path, None]) -> str:
    """
    Stable identifier for a workspace: md5 of its root path.
    Falls back to 'default-session' when there is no workspace.
    """
    if not root:
        return "default-session"
    return hashlib.md5(str(root).encode("utf-8")).hexdigest()
