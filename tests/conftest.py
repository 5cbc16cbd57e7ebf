import os

import pytest

from vcs.base import CommentInfo, RepositoryEnvironmentInfo, RepositoryInfo, VcsClient


class FakeVcsClient(VcsClient):
    """In-memory pull request: comments plus a target branch tree written by download_repository."""

    def __init__(self, baseline_files=None, default_branch="master"):
        self.baseline_files = baseline_files or {}
        self.default_branch = default_branch
        self.comments = []
        self.downloads = []
        self.updates = []

    def get_repository_info(self, owner, repo):
        return RepositoryInfo(default_branch=self.default_branch)

    def get_repository_environment_info(self, owner, repo, name):
        return RepositoryEnvironmentInfo(name=name, reviewers=["froggy"])

    def download_repository(self, owner, repo, branch, local_path):
        self.downloads.append(branch)
        for rel_path, content in self.baseline_files.items():
            path = os.path.join(local_path, rel_path)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w") as f:
                f.write(content)

    def list_comments(self, owner, repo, pull_request_id):
        return list(self.comments)

    def create_comment(self, owner, repo, pull_request_id, content):
        self.comments.append(CommentInfo(id=len(self.comments) + 1, content=content))

    def update_comment(self, owner, repo, pull_request_id, comment_id, content):
        self.updates.append(comment_id)
        self.comments = [CommentInfo(id=c.id, content=content) if c.id == comment_id else c for c in self.comments]


@pytest.fixture
def fake_client():
    return FakeVcsClient()


@pytest.fixture(autouse=True)
def _not_in_github_actions(monkeypatch):
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
