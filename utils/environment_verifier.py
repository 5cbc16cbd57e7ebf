import os

from utils.config import GITHUB, GITHUB_ACTIONS_ENV, GITHUB_API_ENDPOINT
from utils.errors import MissingEnvironmentError, MissingReviewersError, VcsError

FROGBOT_ENVIRONMENT = "frogbot"


def verify_github_frogbot_environment(client, repo_config, environment=FROGBOT_ENVIRONMENT):
    """
    Make sure the 'frogbot' GitHub Environment exists and has reviewers.

    Pull requests from forks run Frogbot with secrets, the Environment is what forces
    a maintainer to approve each run. Only enforced on github.com inside GitHub Actions.
    """
    if os.getenv(GITHUB_ACTIONS_ENV) != "true":
        return
    git = repo_config.git
    if git.provider != GITHUB:
        return
    if git.api_endpoint and git.api_endpoint.rstrip("/") != GITHUB_API_ENDPOINT:
        return

    client.get_repository_info(git.repo_owner, git.repo_name)
    try:
        env_info = client.get_repository_environment_info(git.repo_owner, git.repo_name, environment)
    except VcsError as e:
        print(f"❌ {e}")
        raise MissingEnvironmentError(e) from e
    if not env_info.reviewers:
        raise MissingReviewersError()
