from urllib.parse import quote

import requests

from utils.config import GITLAB_API_ENDPOINT
from utils.errors import VcsError
from vcs.archive import download_and_extract_zip
from vcs.base import CommentInfo, RepositoryEnvironmentInfo, RepositoryInfo, VcsClient


class GitLabClient(VcsClient):
    """GitLab v4 REST API. Pull requests are merge requests, comments are notes."""

    def __init__(self, token, api_endpoint="", session=None):
        endpoint = (api_endpoint or GITLAB_API_ENDPOINT).rstrip("/")
        if not endpoint.endswith("/api/v4"):
            endpoint += "/api/v4"
        self.base_url = endpoint
        self.session = session or requests.Session()
        self.session.headers.update({"PRIVATE-TOKEN": token})

    def _project_url(self, owner, repo):
        return f"{self.base_url}/projects/{quote(f'{owner}/{repo}', safe='')}"

    def _request(self, method, url, **kwargs):
        try:
            resp = self.session.request(method, url, timeout=60, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise VcsError(f"GitLab request {method} {url} failed: {e}") from e
        return resp

    def get_repository_info(self, owner, repo):
        data = self._request("GET", self._project_url(owner, repo)).json()
        return RepositoryInfo(
            clone_url=data.get("http_url_to_repo", ""),
            default_branch=data.get("default_branch", ""),
            private=data.get("visibility") == "private",
        )

    def get_repository_environment_info(self, owner, repo, name):
        raise VcsError("repository environments with reviewers are not supported on GitLab")

    def download_repository(self, owner, repo, branch, local_path):
        url = f"{self._project_url(owner, repo)}/repository/archive.zip?sha={quote(branch, safe='')}"
        download_and_extract_zip(url, dict(self.session.headers), local_path)

    def list_comments(self, owner, repo, pull_request_id):
        url = f"{self._project_url(owner, repo)}/merge_requests/{pull_request_id}/notes"
        comments = []
        page = 1
        while True:
            resp = self._request("GET", url, params={"per_page": 100, "page": page})
            notes = resp.json()
            if not isinstance(notes, list):
                break
            comments.extend(CommentInfo(id=n["id"], content=n.get("body", "")) for n in notes if not n.get("system"))
            next_page = resp.headers.get("X-Next-Page")
            if not next_page:
                break
            page = int(next_page)
        return comments

    def create_comment(self, owner, repo, pull_request_id, content):
        url = f"{self._project_url(owner, repo)}/merge_requests/{pull_request_id}/notes"
        self._request("POST", url, json={"body": content})

    def update_comment(self, owner, repo, pull_request_id, comment_id, content):
        url = f"{self._project_url(owner, repo)}/merge_requests/{pull_request_id}/notes/{comment_id}"
        self._request("PUT", url, json={"body": content})
