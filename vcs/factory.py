from utils.config import GITHUB, GITLAB
from utils.errors import ConfigurationError
from vcs.github import GitHubClient
from vcs.gitlab import GitLabClient


def get_vcs_client(git):
    if git.provider == GITHUB:
        return GitHubClient(git.token, git.api_endpoint)
    if git.provider == GITLAB:
        return GitLabClient(git.token, git.api_endpoint)
    raise ConfigurationError(f"unsupported git provider '{git.provider}'")
