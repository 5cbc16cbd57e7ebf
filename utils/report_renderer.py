from typing import Optional

from xray.models import ScanMode

RESOURCES_URL = "https://raw.githubusercontent.com/jfrog/frogbot/master/resources"
README_URL = "https://github.com/jfrog/frogbot#readme"

VULNERABILITIES_BANNER = f"[![]({RESOURCES_URL}/vulnerabilitiesBanner.png)]({README_URL})"
NO_VULNERABILITIES_BANNER = f"[![]({RESOURCES_URL}/noVulnerabilityBanner.png)]({README_URL})"
WHAT_IS_FROGBOT = f"[What is Frogbot?]({README_URL})"

TABLE_HEADER = (
    "| SEVERITY | DIRECT DEPENDENCIES | DIRECT DEPENDENCIES VERSIONS | IMPACTED DEPENDENCY NAME"
    " | IMPACTED DEPENDENCY VERSION | FIXED VERSIONS | CVE\n"
    ":--: | -- | -- | -- | -- | :--: | --"
)

SEVERITY_ICONS = {
    "critical": f"{RESOURCES_URL}/criticalSeverity.png",
    "high": f"{RESOURCES_URL}/highSeverity.png",
    "medium": f"{RESOURCES_URL}/mediumSeverity.png",
    "low": f"{RESOURCES_URL}/lowSeverity.png",
    "unknown": f"{RESOURCES_URL}/unknownSeverity.png",
}


class OutputWriter:
    """Markdown flavour of the pull request comment."""

    cell_separator = "<br>"

    def no_vulnerabilities_message(self) -> str:
        raise NotImplementedError

    def header(self, mode: Optional[ScanMode]) -> str:
        raise NotImplementedError

    def severity_cell(self, severity: str) -> str:
        return severity

    def table_row(self, row) -> str:
        sep = self.cell_separator
        cells = [
            self.severity_cell(row.severity),
            sep.join(c.name for c in row.components),
            sep.join(c.version for c in row.components),
            row.impacted_dependency_name,
            row.impacted_dependency_version,
            sep.join(row.fixed_versions),
            sep.join(cve.id for cve in row.cves),
        ]
        return "\n| " + " | ".join(cells) + " "


class StandardOutput(OutputWriter):
    """GitHub and GitLab flavoured markdown, with banner and severity icons."""

    def no_vulnerabilities_message(self) -> str:
        return f"{NO_VULNERABILITIES_BANNER}\n\n{WHAT_IS_FROGBOT}\n"

    def header(self, mode: Optional[ScanMode]) -> str:
        return f"{VULNERABILITIES_BANNER}\n\n{WHAT_IS_FROGBOT}\n\n{TABLE_HEADER}"

    def severity_cell(self, severity: str) -> str:
        icon = SEVERITY_ICONS.get(severity.lower())
        if icon is None:
            return severity
        return f"![]({icon})<br>{severity:>8}"


class SimplifiedOutput(OutputWriter):
    """Plain markdown for providers that don't render images or html in tables."""

    cell_separator = ", "

    def no_vulnerabilities_message(self) -> str:
        return "**👍 Frogbot scanned this pull request and found that it did not add vulnerable dependencies.**\n"

    def header(self, mode: Optional[ScanMode]) -> str:
        # None when the rows come from projects scanned in different modes
        found = mode.value if mode else "issues"
        return f"**🚨 Frogbot scanned this pull request and found new {found}:**\n\n---\n{TABLE_HEADER}"


def get_output_writer(simplified: bool) -> OutputWriter:
    return SimplifiedOutput() if simplified else StandardOutput()


def create_pull_request_message(rows, writer: OutputWriter, mode: Optional[ScanMode] = ScanMode.VULNERABILITIES) -> str:
    """Render rows in the order given. The same rows always give the same bytes."""
    if not rows:
        return writer.no_vulnerabilities_message()
    return writer.header(mode) + "".join(writer.table_row(row) for row in rows)
