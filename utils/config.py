import os
import shlex
from dataclasses import dataclass, field
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from utils.errors import ConfigurationError

load_dotenv()

GITHUB = "github"
GITLAB = "gitlab"
SUPPORTED_PROVIDERS = (GITHUB, GITLAB)

GITHUB_API_ENDPOINT = "https://api.github.com"
GITLAB_API_ENDPOINT = "https://gitlab.com"
DEFAULT_CONFIG_PATH = os.path.join(".frogbot", "frogbot-config.yml")

GITHUB_ACTIONS_ENV = "GITHUB_ACTIONS"


@dataclass
class GitParams:
    provider: str
    repo_owner: str
    repo_name: str
    token: str
    api_endpoint: str = ""
    pull_request_id: int = 0
    base_branch: str = ""


@dataclass
class ServerDetails:
    url: str = ""
    access_token: str = ""
    user: str = ""
    password: str = ""

    def as_env(self) -> dict:
        env = {"JF_URL": self.url}
        if self.access_token:
            env["JF_ACCESS_TOKEN"] = self.access_token
        else:
            env["JF_USER"] = self.user
            env["JF_PASSWORD"] = self.password
        return env


@dataclass
class Project:
    install_command_name: str = ""
    install_command_args: List[str] = field(default_factory=list)
    working_dirs: List[str] = field(default_factory=lambda: ["."])
    watches: List[str] = field(default_factory=list)
    project_key: str = ""
    include_licenses: bool = False
    fail_on_install_error: bool = True


@dataclass
class RepoConfig:
    git: GitParams
    server: ServerDetails
    projects: List[Project] = field(default_factory=lambda: [Project()])
    fail_on_security_issues: bool = True
    simplified_output: bool = False
    fail_fast: bool = True


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    value = value.strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{value}'")


def _get_list(name: str) -> List[str]:
    value = os.getenv(name, "")
    return [part.strip() for part in value.split(",") if part.strip()]


def _require(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(f"'{name}' environment variable is missing")
    return value


def parse_install_command(command: str):
    """'npm i --legacy-peer-deps' -> ('npm', ['i', '--legacy-peer-deps'])"""
    parts = shlex.split(command or "")
    if not parts:
        return "", []
    return parts[0], parts[1:]


def extract_git_params_from_env() -> GitParams:
    provider = _require("JF_GIT_PROVIDER").lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(f"unsupported git provider '{provider}', expected one of: {', '.join(SUPPORTED_PROVIDERS)}")

    pr_id = os.getenv("JF_GIT_PULL_REQUEST_ID", "0").strip() or "0"
    try:
        pull_request_id = int(pr_id)
    except ValueError:
        raise ConfigurationError(f"JF_GIT_PULL_REQUEST_ID must be a number, got '{pr_id}'")

    return GitParams(
        provider=provider,
        repo_owner=_require("JF_GIT_OWNER"),
        repo_name=_require("JF_GIT_REPO"),
        token=_require("JF_GIT_TOKEN"),
        api_endpoint=os.getenv("JF_GIT_API_ENDPOINT", "").strip(),
        pull_request_id=pull_request_id,
        base_branch=os.getenv("JF_GIT_BASE_BRANCH", "").strip(),
    )


def extract_server_details_from_env() -> ServerDetails:
    server = ServerDetails(
        url=_require("JF_URL").rstrip("/"),
        access_token=os.getenv("JF_ACCESS_TOKEN", ""),
        user=os.getenv("JF_USER", ""),
        password=os.getenv("JF_PASSWORD", ""),
    )
    if not server.access_token and not (server.user and server.password):
        raise ConfigurationError("'JF_ACCESS_TOKEN' or 'JF_USER' and 'JF_PASSWORD' environment variables are missing")
    return server


def extract_project_from_env() -> Project:
    name, args = parse_install_command(os.getenv("JF_INSTALL_DEPS_CMD", ""))
    return Project(
        install_command_name=name,
        install_command_args=args,
        working_dirs=_get_list("JF_WORKING_DIR") or ["."],
        watches=_get_list("JF_WATCHES"),
        project_key=os.getenv("JF_PROJECT", "").strip(),
        include_licenses=_get_bool("JF_INCLUDE_LICENSES", False),
    )


def _project_from_yaml(raw: dict, defaults: Project, where: str) -> Project:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected a mapping, got {type(raw).__name__}")
    name, args = defaults.install_command_name, list(defaults.install_command_args)
    if raw.get("installCommand"):
        name, args = parse_install_command(raw["installCommand"])
    working_dirs = raw.get("workingDirs") or list(defaults.working_dirs)
    if not isinstance(working_dirs, list):
        raise ConfigurationError(f"{where}: 'workingDirs' must be a list")
    return Project(
        install_command_name=name,
        install_command_args=args,
        working_dirs=[str(wd) for wd in working_dirs],
        watches=list(defaults.watches),
        project_key=defaults.project_key,
        include_licenses=bool(raw.get("includeLicenses", defaults.include_licenses)),
        fail_on_install_error=bool(raw.get("failOnInstallError", defaults.fail_on_install_error)),
    )


def read_config_file(path: str, git: GitParams, defaults: Project):
    """
    Read the projects section of a frogbot-config.yml that matches the current repository.

    Returns (projects, fail_on_security_issues or None).
    """
    try:
        with open(path) as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML: {e}") from e

    if not isinstance(content, list):
        raise ConfigurationError(f"{path}: expected a list of repository configurations")

    for i, entry in enumerate(content):
        params = (entry or {}).get("params") if isinstance(entry, dict) else None
        if not isinstance(params, dict):
            raise ConfigurationError(f"{path}: entry {i} has no 'params' mapping")
        repo_name = (params.get("git") or {}).get("repoName")
        if repo_name and repo_name != git.repo_name:
            continue

        platform = params.get("jfrogPlatform") or {}
        project_defaults = Project(
            install_command_name=defaults.install_command_name,
            install_command_args=list(defaults.install_command_args),
            working_dirs=list(defaults.working_dirs),
            watches=list(platform.get("watches") or defaults.watches),
            project_key=platform.get("jfrogProjectKey") or defaults.project_key,
            include_licenses=defaults.include_licenses,
        )
        scan = params.get("scan") or {}
        raw_projects = scan.get("projects") or [{}]
        projects = [_project_from_yaml(p, project_defaults, f"{path}: params[{i}].scan.projects[{j}]") for j, p in enumerate(raw_projects)]
        return projects, scan.get("failOnSecurityIssues")

    raise ConfigurationError(f"{path}: no configuration found for repository '{git.repo_name}'")


def load_repo_config(config_path: Optional[str] = None) -> RepoConfig:
    """Build the run configuration from the environment and, if present, a frogbot-config.yml."""
    git = extract_git_params_from_env()
    server = extract_server_details_from_env()
    env_project = extract_project_from_env()
    fail_on_security_issues = _get_bool("JF_FAIL", True)

    projects = [env_project]
    path = config_path or DEFAULT_CONFIG_PATH
    if os.path.exists(path):
        print(f"📄 Reading Frogbot config from {path}")
        projects, file_fail = read_config_file(path, git, env_project)
        if file_fail is not None and os.getenv("JF_FAIL") is None:
            fail_on_security_issues = bool(file_fail)
    elif config_path:
        raise ConfigurationError(f"config file {config_path} doesn't exist")

    return RepoConfig(
        git=git,
        server=server,
        projects=projects,
        fail_on_security_issues=fail_on_security_issues,
        simplified_output=_get_bool("JF_USE_SIMPLIFIED_OUTPUT", False),
        fail_fast=_get_bool("JF_FAIL_FAST", True),
    )
