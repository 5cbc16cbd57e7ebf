from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


@dataclass
class RepositoryInfo:
    clone_url: str = ""
    default_branch: str = ""
    private: bool = False


@dataclass
class RepositoryEnvironmentInfo:
    name: str = ""
    url: str = ""
    reviewers: List[str] = field(default_factory=list)


@dataclass
class CommentInfo:
    id: int
    content: str


class VcsClient(ABC):
    """The subset of a git provider's API that scanning a pull request needs."""

    @abstractmethod
    def get_repository_info(self, owner, repo) -> RepositoryInfo:
        ...

    @abstractmethod
    def get_repository_environment_info(self, owner, repo, name) -> RepositoryEnvironmentInfo:
        ...

    @abstractmethod
    def download_repository(self, owner, repo, branch, local_path):
        """Extract the branch's tree directly into local_path."""

    @abstractmethod
    def list_comments(self, owner, repo, pull_request_id) -> List[CommentInfo]:
        ...

    @abstractmethod
    def create_comment(self, owner, repo, pull_request_id, content):
        ...

    @abstractmethod
    def update_comment(self, owner, repo, pull_request_id, comment_id, content):
        ...
