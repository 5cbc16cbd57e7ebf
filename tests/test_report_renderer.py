from pathlib import Path

from utils.delta import ComponentRow, CveRow, IssueRow
from utils.report_renderer import SimplifiedOutput, StandardOutput, create_pull_request_message, get_output_writer
from xray.models import ScanMode

MESSAGES = Path(__file__).parent / "testdata" / "messages"

ROWS = [
    IssueRow(
        issue_id="XRAY-1",
        severity="High",
        impacted_dependency_name="github.com/nats-io/nats-streaming-server",
        impacted_dependency_version="v0.21.0",
        fixed_versions=("[0.24.1]",),
        components=(ComponentRow(name="github.com/nats-io/nats-streaming-server", version="v0.21.0"),),
        cves=(CveRow(id="CVE-2022-24450"),),
    ),
    IssueRow(
        issue_id="XRAY-2",
        severity="High",
        impacted_dependency_name="github.com/mholt/archiver/v3",
        impacted_dependency_version="v3.5.1",
        components=(ComponentRow(name="github.com/mholt/archiver/v3", version="v3.5.1"),),
        cves=(),
    ),
    IssueRow(
        issue_id="XRAY-3",
        severity="Medium",
        impacted_dependency_name="github.com/nats-io/nats-streaming-server",
        impacted_dependency_version="v0.21.0",
        fixed_versions=("[0.24.3]",),
        components=(ComponentRow(name="github.com/nats-io/nats-streaming-server", version="v0.21.0"),),
        cves=(CveRow(id="CVE-2022-26652"),),
    ),
]


def _read_message(name):
    return (MESSAGES / name).read_text(encoding="utf-8").replace("\r\n", "\n")


def test_no_vulnerabilities_message():
    assert create_pull_request_message([], StandardOutput()) == _read_message("novulnerabilities.md")


def test_no_vulnerabilities_message_simplified():
    assert create_pull_request_message([], SimplifiedOutput()) == _read_message("novulnerabilities_simplified.md")


def test_pull_request_message():
    expected = (
        "[![](https://raw.githubusercontent.com/jfrog/frogbot/master/resources/vulnerabilitiesBanner.png)](https://github.com/jfrog/frogbot#readme)\n\n"
        "[What is Frogbot?](https://github.com/jfrog/frogbot#readme)\n\n"
        "| SEVERITY | DIRECT DEPENDENCIES | DIRECT DEPENDENCIES VERSIONS | IMPACTED DEPENDENCY NAME | IMPACTED DEPENDENCY VERSION | FIXED VERSIONS | CVE\n"
        ":--: | -- | -- | -- | -- | :--: | --\n"
        "| ![](https://raw.githubusercontent.com/jfrog/frogbot/master/resources/highSeverity.png)<br>    High | github.com/nats-io/nats-streaming-server | v0.21.0 | github.com/nats-io/nats-streaming-server | v0.21.0 | [0.24.1] | CVE-2022-24450 \n"
        "| ![](https://raw.githubusercontent.com/jfrog/frogbot/master/resources/highSeverity.png)<br>    High | github.com/mholt/archiver/v3 | v3.5.1 | github.com/mholt/archiver/v3 | v3.5.1 |  |  \n"
        "| ![](https://raw.githubusercontent.com/jfrog/frogbot/master/resources/mediumSeverity.png)<br>  Medium | github.com/nats-io/nats-streaming-server | v0.21.0 | github.com/nats-io/nats-streaming-server | v0.21.0 | [0.24.3] | CVE-2022-26652 "
    )
    assert create_pull_request_message(ROWS, StandardOutput()) == expected


def test_rendering_is_deterministic():
    assert create_pull_request_message(ROWS, StandardOutput()) == create_pull_request_message(list(ROWS), StandardOutput())


def test_rows_keep_their_order():
    message = create_pull_request_message(list(reversed(ROWS)), StandardOutput())
    assert message.index("mediumSeverity.png") < message.index("highSeverity.png")


def test_unknown_severity_string_has_no_icon():
    row = IssueRow(issue_id="XRAY-9", severity="Weird", impacted_dependency_name="lodash", impacted_dependency_version="4.17.0")
    message = create_pull_request_message([row], StandardOutput())
    assert message.endswith("\n| Weird |  |  | lodash | 4.17.0 |  |  ")


def test_severity_icons_are_case_insensitive():
    row = IssueRow(issue_id="XRAY-9", severity="critical", impacted_dependency_name="lodash")
    message = create_pull_request_message([row], StandardOutput())
    assert "criticalSeverity.png)<br>critical |" in message


def test_multiple_values_in_a_cell_are_line_broken():
    row = IssueRow(
        issue_id="XRAY-5",
        severity="Low",
        impacted_dependency_name="minimist",
        impacted_dependency_version="1.2.0",
        fixed_versions=("[1.2.3]", "[0.2.1]"),
        components=(ComponentRow("mkdirp", "0.5.1"), ComponentRow("optimist", "0.6.1")),
        cves=(CveRow("CVE-2020-7598"), CveRow("CVE-2021-44906")),
    )
    message = create_pull_request_message([row], StandardOutput())
    assert message.endswith(
        "| mkdirp<br>optimist | 0.5.1<br>0.6.1 | minimist | 1.2.0 | [1.2.3]<br>[0.2.1] | CVE-2020-7598<br>CVE-2021-44906 "
    )


def test_simplified_output():
    message = create_pull_request_message(ROWS[1:2], SimplifiedOutput(), ScanMode.VIOLATIONS)
    assert message == (
        "**🚨 Frogbot scanned this pull request and found new violations:**\n\n---\n"
        "| SEVERITY | DIRECT DEPENDENCIES | DIRECT DEPENDENCIES VERSIONS | IMPACTED DEPENDENCY NAME | IMPACTED DEPENDENCY VERSION | FIXED VERSIONS | CVE\n"
        ":--: | -- | -- | -- | -- | :--: | --\n"
        "| High | github.com/mholt/archiver/v3 | v3.5.1 | github.com/mholt/archiver/v3 | v3.5.1 |  |  "
    )


def test_simplified_header_without_a_single_mode():
    message = create_pull_request_message(ROWS[1:2], SimplifiedOutput(), None)
    assert message.startswith("**🚨 Frogbot scanned this pull request and found new issues:**\n\n---\n")


def test_get_output_writer():
    assert isinstance(get_output_writer(False), StandardOutput)
    assert isinstance(get_output_writer(True), SimplifiedOutput)
