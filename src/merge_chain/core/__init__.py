"""Core utilities: branch naming, configuration, git access."""

from .branches import BRANCH_PREFIX, ChapterRange, branch_name, parse_branch_id
from .config import ChainConfig, load_config
from .git_ops import find_git_dir, find_repo_root, run_command

__all__ = [
    "BRANCH_PREFIX",
    "ChapterRange",
    "branch_name",
    "parse_branch_id",
    "ChainConfig",
    "load_config",
    "find_git_dir",
    "find_repo_root",
    "run_command",
]
