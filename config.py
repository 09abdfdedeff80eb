from typing import Dict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "grading"
    postgres_user: str = "grading"
    postgres_password: str = ""

    workspace_root: str = "/tmp/grading/workspaces"
    toolchain_scripts_path: str = "/opt/grading/toolchains"

    docker_binary: str = "docker"
    container_mount_path: str = "/home/files"

    grading_run_timeout_seconds: int = 120
    grading_max_workers: int = 1

    submission_max_size_mb: float = 1.0
    # Must exceed run timeout plus container cleanup, or live workspaces get swept
    workspace_stale_after_seconds: int = 600
    process_output_limit_bytes: int = 65536

    # Image overrides keyed by language value, e.g. {"cpp": "gcc:13"}
    toolchain_images: Dict[str, str] = {}

    class Config:
        env_prefix = ""
        env_file = ".env"
        extra = "ignore"

    def get_database_url(self) -> str:
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"


config = Settings()
