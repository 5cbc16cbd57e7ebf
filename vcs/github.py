from github import Github, GithubException

from utils.config import GITHUB_API_ENDPOINT
from utils.errors import VcsError
from vcs.archive import download_and_extract_zip
from vcs.base import CommentInfo, RepositoryEnvironmentInfo, RepositoryInfo, VcsClient


def _reviewer_name(reviewer) -> str:
    # Reviewers are either users (login) or teams (slug)
    return getattr(reviewer, "login", None) or getattr(reviewer, "slug", None) or getattr(reviewer, "name", "") or ""


class GitHubClient(VcsClient):
    def __init__(self, token, api_endpoint="", github_client=None):
        self.token = token
        self.api_endpoint = api_endpoint or GITHUB_API_ENDPOINT
        self._github = github_client or Github(token, base_url=self.api_endpoint)

    def _repo(self, owner, repo):
        try:
            return self._github.get_repo(f"{owner}/{repo}")
        except GithubException as e:
            raise VcsError(f"failed to get repository {owner}/{repo}: {e}") from e

    def get_repository_info(self, owner, repo):
        r = self._repo(owner, repo)
        return RepositoryInfo(clone_url=r.clone_url, default_branch=r.default_branch, private=r.private)

    def get_repository_environment_info(self, owner, repo, name):
        r = self._repo(owner, repo)
        try:
            env = r.get_environment(name)
        except GithubException as e:
            raise VcsError(f"failed to get environment '{name}' of {owner}/{repo}: {e}") from e

        reviewers = []
        for rule in env.protection_rules or []:
            for rule_reviewer in getattr(rule, "reviewers", None) or []:
                login = _reviewer_name(rule_reviewer.reviewer)
                if login:
                    reviewers.append(login)
        return RepositoryEnvironmentInfo(name=env.name, url=env.html_url, reviewers=reviewers)

    def download_repository(self, owner, repo, branch, local_path):
        r = self._repo(owner, repo)
        try:
            archive_url = r.get_archive_link("zipball", ref=branch)
        except GithubException as e:
            raise VcsError(f"failed to get archive link of {owner}/{repo}@{branch}: {e}") from e
        download_and_extract_zip(archive_url, {"Authorization": f"token {self.token}"}, local_path)

    def _issue(self, owner, repo, pull_request_id):
        try:
            return self._repo(owner, repo).get_issue(pull_request_id)
        except GithubException as e:
            raise VcsError(f"failed to get pull request #{pull_request_id} of {owner}/{repo}: {e}") from e

    def list_comments(self, owner, repo, pull_request_id):
        issue = self._issue(owner, repo, pull_request_id)
        try:
            return [CommentInfo(id=c.id, content=c.body or "") for c in issue.get_comments()]
        except GithubException as e:
            raise VcsError(f"failed to list comments of pull request #{pull_request_id}: {e}") from e

    def create_comment(self, owner, repo, pull_request_id, content):
        issue = self._issue(owner, repo, pull_request_id)
        try:
            issue.create_comment(content)
        except GithubException as e:
            raise VcsError(f"failed to comment on pull request #{pull_request_id}: {e}") from e

    def update_comment(self, owner, repo, pull_request_id, comment_id, content):
        issue = self._issue(owner, repo, pull_request_id)
        try:
            issue.get_comment(comment_id).edit(content)
        except GithubException as e:
            raise VcsError(f"failed to update comment {comment_id} on pull request #{pull_request_id}: {e}") from e
