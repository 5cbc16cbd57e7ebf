SECURITY_ISSUE_FOUND_ERR = "issues were detected by Frogbot\n You can avoid marking the Frogbot scan as failed by setting failOnSecurityIssues to false in the frogbot-config.yml file"
NO_GITHUB_ENV_ERR = "frogbot GitHub Environment doesn't exist. Please refer to the Frogbot documentation for instructions on how to create the Environment"
NO_GITHUB_ENV_REVIEWERS_ERR = "frogbot GitHub Environment doesn't have any reviewers. Please refer to the Frogbot documentation for instructions on how to add reviewers to the Environment"


class FrogbotError(Exception):
    """Base class for every error raised by Frogbot itself."""


class ConfigurationError(FrogbotError):
    pass


class InstallError(FrogbotError):
    pass


class ScanError(FrogbotError):
    pass


class MalformedScanResultError(ScanError):
    """A scan response that can't be expanded into issue rows."""


class VcsError(FrogbotError):
    pass


class SecurityIssuesFoundError(FrogbotError):
    """New issues exist and the repository is configured to fail on them.

    This is the expected "gate failed" outcome, not a crash.
    """

    def __init__(self, rows_count=0):
        super().__init__(SECURITY_ISSUE_FOUND_ERR)
        self.rows_count = rows_count


class EnvironmentGovernanceError(FrogbotError):
    pass


class MissingEnvironmentError(EnvironmentGovernanceError):
    def __init__(self, cause=None):
        message = NO_GITHUB_ENV_ERR if cause is None else f"{NO_GITHUB_ENV_ERR}: {cause}"
        super().__init__(message)


class MissingReviewersError(EnvironmentGovernanceError):
    def __init__(self):
        super().__init__(NO_GITHUB_ENV_REVIEWERS_ERR)


class ScanCancelledError(FrogbotError):
    pass


class ScanPullRequestError(FrogbotError):
    """Aggregate of the per working directory failures of one run."""

    def __init__(self, failures):
        self.failures = list(failures)
        details = "\n".join(f"- {wd}: {err}" for wd, err in self.failures)
        super().__init__(f"{len(self.failures)} working director{'y' if len(self.failures) == 1 else 'ies'} failed:\n{details}")
