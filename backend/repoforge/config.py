from pydantic import BaseModel
from functools import lru_cache
from pathlib import Path
import os

# Hook templates shipped with the package
BUNDLED_HOOKS_DIR = Path(__file__).parent / "hooks"


class Settings(BaseModel):
    app_name: str = "repoforge"
    database_url: str = "sqlite+aiosqlite:///./repoforge.db"
    base_path: Path = Path("./repositories")  # Root directory for all bare repos
    host_url: str = "http://localhost"  # Public URL prefix for web links
    ssh_user: str = "git"
    ssh_host: str = "localhost"
    hooks_dir: Path = BUNDLED_HOOKS_DIR
    hook_names: list[str] = ["post-receive"]
    admin_repo_name: str = "gitolite-admin"  # Reserved, never provisioned
    gateway_timeout: float = 30.0  # Seconds before a gateway call surfaces a timeout
    gateway_read_only: bool = False
    default_projects_limit: int = 10


@lru_cache
def get_settings() -> Settings:
    hook_names = os.getenv("REPOFORGE_HOOK_NAMES")
    return Settings(
        database_url=os.getenv("REPOFORGE_DATABASE_URL", "sqlite+aiosqlite:///./repoforge.db"),
        base_path=Path(os.getenv("REPOFORGE_BASE_PATH", "./repositories")),
        host_url=os.getenv("REPOFORGE_HOST_URL", "http://localhost"),
        ssh_user=os.getenv("REPOFORGE_SSH_USER", "git"),
        ssh_host=os.getenv("REPOFORGE_SSH_HOST", "localhost"),
        hooks_dir=Path(os.getenv("REPOFORGE_HOOKS_DIR", str(BUNDLED_HOOKS_DIR))),
        hook_names=hook_names.split(",") if hook_names else ["post-receive"],
        gateway_timeout=float(os.getenv("REPOFORGE_GATEWAY_TIMEOUT", "30")),
        gateway_read_only=os.getenv("REPOFORGE_GATEWAY_READ_ONLY", "").lower() in ("1", "true", "yes"),
        default_projects_limit=int(os.getenv("REPOFORGE_PROJECTS_LIMIT", "10")),
    )
