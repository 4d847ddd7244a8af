"""Runtime settings.

crate-diff reads no configuration file and no environment variables; the
CLI builds a Settings instance from its options and passes it down.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

CRATES_INDEX_URL = "https://index.crates.io/"
CRATES_DOWNLOAD_URL = "https://crates.io/api/v1/crates/"
PYPI_URL = "https://pypi.org/pypi/"
USER_AGENT = "crate-diff (https://github.com/crate-diff/crate-diff)"

# Files that only carry packaging noise in published crates.
DEFAULT_TREE_EXCLUDES = frozenset({"ci.yml", ".cargo_vcs_info.json"})


class Settings(BaseModel):
    """Network endpoints and defaults for one invocation."""

    model_config = ConfigDict(frozen=True)

    crates_index_url: str = CRATES_INDEX_URL
    crates_download_url: str = CRATES_DOWNLOAD_URL
    pypi_url: str = PYPI_URL
    user_agent: str = USER_AGENT
    timeout_seconds: float = Field(default=30.0, gt=0)
    tree_excludes: frozenset[str] = DEFAULT_TREE_EXCLUDES
