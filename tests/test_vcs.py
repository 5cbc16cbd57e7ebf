import io
import zipfile
from unittest.mock import MagicMock, patch

import pytest
import requests
from github import GithubException

from utils.config import GITHUB, GITLAB, GitParams
from utils.errors import ConfigurationError, VcsError
from vcs.archive import download_and_extract_zip
from vcs.base import CommentInfo
from vcs.factory import get_vcs_client
from vcs.github import GitHubClient
from vcs.gitlab import GitLabClient


def _response(json_data=None, status=200, headers=None, content=b""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = json_data
    resp.headers = headers or {}
    resp.content = content
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def _zip_bytes(files):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


# --- GitLab ---

@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


def test_gitlab_endpoint_and_token(session):
    client = GitLabClient("123456", "https://gitlab.acme.io/", session=session)
    assert client.base_url == "https://gitlab.acme.io/api/v4"
    assert session.headers["PRIVATE-TOKEN"] == "123456"


def test_gitlab_list_comments_follows_pages(session):
    session.request.side_effect = [
        _response([{"id": 1, "body": "first"}, {"id": 2, "body": "assigned to @froggy", "system": True}], headers={"X-Next-Page": "2"}),
        _response([{"id": 3, "body": "second"}], headers={"X-Next-Page": ""}),
    ]
    client = GitLabClient("123456", session=session)

    comments = client.list_comments("jfrog", "test-proj", 1)

    assert comments == [CommentInfo(id=1, content="first"), CommentInfo(id=3, content="second")]
    method, url = session.request.call_args_list[0].args
    assert method == "GET"
    assert url == "https://gitlab.com/api/v4/projects/jfrog%2Ftest-proj/merge_requests/1/notes"


def test_gitlab_create_and_update_comment(session):
    session.request.return_value = _response({})
    client = GitLabClient("123456", session=session)

    client.create_comment("jfrog", "test-proj", 1, "body")
    client.update_comment("jfrog", "test-proj", 1, 42, "new body")

    create, update = session.request.call_args_list
    assert create.args == ("POST", "https://gitlab.com/api/v4/projects/jfrog%2Ftest-proj/merge_requests/1/notes")
    assert create.kwargs["json"] == {"body": "body"}
    assert update.args == ("PUT", "https://gitlab.com/api/v4/projects/jfrog%2Ftest-proj/merge_requests/1/notes/42")
    assert update.kwargs["json"] == {"body": "new body"}


def test_gitlab_repository_info(session):
    session.request.return_value = _response({"http_url_to_repo": "https://gitlab.com/jfrog/test-proj.git", "default_branch": "main", "visibility": "private"})
    info = GitLabClient("123456", session=session).get_repository_info("jfrog", "test-proj")
    assert info.default_branch == "main"
    assert info.private is True


def test_gitlab_errors_become_vcs_errors(session):
    session.request.return_value = _response(status=404)
    with pytest.raises(VcsError, match="404"):
        GitLabClient("123456", session=session).get_repository_info("jfrog", "test-proj")


def test_gitlab_has_no_environments(session):
    with pytest.raises(VcsError):
        GitLabClient("123456", session=session).get_repository_environment_info("jfrog", "test-proj", "frogbot")


# --- GitHub ---

def test_github_environment_reviewers():
    gh = MagicMock()
    user = MagicMock(spec=["login"])
    user.login = "froggy"
    team = MagicMock(spec=["slug"])
    team.slug = "security"
    env = gh.get_repo.return_value.get_environment.return_value
    env.name = "frogbot"
    env.html_url = "https://github.com/jfrog/frogbot/deployments/activity_log?environments_filter=frogbot"
    env.protection_rules = [MagicMock(reviewers=[MagicMock(reviewer=user), MagicMock(reviewer=team)])]

    info = GitHubClient("123456", github_client=gh).get_repository_environment_info("jfrog", "frogbot", "frogbot")

    gh.get_repo.assert_called_with("jfrog/frogbot")
    assert info.reviewers == ["froggy", "security"]


def test_github_missing_environment():
    gh = MagicMock()
    gh.get_repo.return_value.get_environment.side_effect = GithubException(404, {"message": "Not Found"}, None)
    with pytest.raises(VcsError, match="frogbot"):
        GitHubClient("123456", github_client=gh).get_repository_environment_info("jfrog", "frogbot", "frogbot")


def test_github_comments():
    gh = MagicMock()
    issue = gh.get_repo.return_value.get_issue.return_value
    issue.get_comments.return_value = [MagicMock(id=1, body="hello"), MagicMock(id=2, body=None)]
    client = GitHubClient("123456", github_client=gh)

    assert client.list_comments("jfrog", "frogbot", 5) == [CommentInfo(1, "hello"), CommentInfo(2, "")]
    client.create_comment("jfrog", "frogbot", 5, "body")
    client.update_comment("jfrog", "frogbot", 5, 2, "new body")

    gh.get_repo.return_value.get_issue.assert_called_with(5)
    issue.create_comment.assert_called_once_with("body")
    issue.get_comment.assert_called_once_with(2)
    issue.get_comment.return_value.edit.assert_called_once_with("new body")


def test_github_download_repository(tmp_path):
    gh = MagicMock()
    gh.get_repo.return_value.get_archive_link.return_value = "https://codeload.github.com/jfrog/frogbot/legacy.zip/master"
    archive = _zip_bytes({"jfrog-frogbot-abc123/go.mod": "module frogbot", "jfrog-frogbot-abc123/sub/package.json": "{}"})

    with patch("vcs.archive.requests.get", return_value=_response(content=archive)) as get:
        GitHubClient("123456", github_client=gh).download_repository("jfrog", "frogbot", "master", str(tmp_path))

    gh.get_repo.return_value.get_archive_link.assert_called_once_with("zipball", ref="master")
    assert get.call_args.kwargs["headers"] == {"Authorization": "token 123456"}
    assert (tmp_path / "go.mod").read_text() == "module frogbot"
    assert (tmp_path / "sub" / "package.json").exists()


# --- archive and factory ---

def test_download_rejects_bad_archives(tmp_path):
    with patch("vcs.archive.requests.get", return_value=_response(content=b"not a zip")):
        with pytest.raises(VcsError, match="not a valid zip"):
            download_and_extract_zip("https://example.com/a.zip", {}, str(tmp_path))
    with patch("vcs.archive.requests.get", return_value=_response(status=500)):
        with pytest.raises(VcsError, match="500"):
            download_and_extract_zip("https://example.com/a.zip", {}, str(tmp_path))


def test_get_vcs_client():
    github = get_vcs_client(GitParams(provider=GITHUB, repo_owner="jfrog", repo_name="frogbot", token="123456"))
    gitlab = get_vcs_client(GitParams(provider=GITLAB, repo_owner="jfrog", repo_name="frogbot", token="123456"))
    assert isinstance(github, GitHubClient)
    assert isinstance(gitlab, GitLabClient)
    with pytest.raises(ConfigurationError):
        get_vcs_client(GitParams(provider="bitbucket", repo_owner="jfrog", repo_name="frogbot", token="123456"))
