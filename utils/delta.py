"""
Delta engine: turns Xray scan results into issue rows and keeps only the rows
that the pull request introduced.

A row is one (issue, impacted component) pair. Two rows are the same issue when
they share the issue id and the impacted dependency name. Severity and versions
are carried along but don't take part in the comparison.
"""
from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

from utils.errors import MalformedScanResultError
from xray.models import ScanMode

LICENSE_VIOLATION_TYPE = "license"

SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3, "unknown": 4}


@dataclass(frozen=True)
class ComponentRow:
    name: str
    version: str = ""


@dataclass(frozen=True)
class CveRow:
    id: str


@dataclass(frozen=True)
class IssueRow:
    issue_id: str
    severity: str
    impacted_dependency_name: str
    impacted_dependency_version: str = ""
    fixed_versions: Tuple[str, ...] = ()
    cves: Tuple[CveRow, ...] = ()
    components: Tuple[ComponentRow, ...] = ()

    @property
    def unique_id(self) -> Tuple[str, str]:
        return self.issue_id, self.impacted_dependency_name


def split_component_id(component_id: str) -> Tuple[str, str]:
    """'npm://lodash:4.17.0' -> ('lodash', '4.17.0'). Ids without a package type are returned whole."""
    if "://" not in component_id:
        return component_id, ""
    _, _, id_without_type = component_id.partition("://")
    name, sep, version = id_without_type.rpartition(":")
    if not sep:
        return id_without_type, ""
    return name, version


def get_direct_components(component) -> Tuple[ComponentRow, ...]:
    """The first dependency after the project root on every impact path."""
    direct = []
    seen = set()
    for path in component.impact_paths:
        if not path:
            continue
        node = path[1] if len(path) > 1 else path[0]
        if node.component_id in seen:
            continue
        seen.add(node.component_id)
        name, version = split_component_id(node.component_id)
        direct.append(ComponentRow(name=name, version=version))
    return tuple(direct)


def _findings_for_mode(scan_results, mode: ScanMode, include_licenses: bool):
    for result in scan_results:
        if mode == ScanMode.VIOLATIONS:
            for violation in result.violations:
                if violation.violation_type == LICENSE_VIOLATION_TYPE and not include_licenses:
                    continue
                yield violation
        else:
            yield from result.vulnerabilities


def _check_finding(finding):
    if not finding.issue_id:
        raise MalformedScanResultError(f"scan response contains a finding without an issue id (summary: {finding.summary!r})")
    if finding.components is None:
        raise MalformedScanResultError(f"issue {finding.issue_id} has no components")


def _expand(finding) -> List[IssueRow]:
    _check_finding(finding)
    cves = tuple(CveRow(id=cve.id) for cve in finding.cves)
    rows = []
    for component_id, component in finding.components.items():
        name, version = split_component_id(component_id)
        rows.append(IssueRow(
            issue_id=finding.issue_id,
            severity=finding.severity,
            impacted_dependency_name=name,
            impacted_dependency_version=version,
            fixed_versions=tuple(component.fixed_versions),
            cves=cves,
            components=get_direct_components(component),
        ))
    return rows


def _unique_ids(scan_results) -> Set[Tuple[str, str]]:
    ids = set()
    for result in scan_results:
        for finding in list(result.violations) + list(result.vulnerabilities):
            _check_finding(finding)
            for component_id in finding.components:
                ids.add((finding.issue_id, split_component_id(component_id)[0]))
    return ids


def create_all_issues_rows(current_scans: Iterable, mode: ScanMode, include_licenses: bool = False) -> List[IssueRow]:
    """Every (issue, impacted dependency) of the current scans, once each, first occurrence kept."""
    rows, seen = [], set()
    for finding in _findings_for_mode(current_scans, mode, include_licenses):
        for row in _expand(finding):
            if row.unique_id in seen:
                continue
            seen.add(row.unique_id)
            rows.append(row)
    return rows


def create_new_issues_rows(previous_scans: Iterable, current_scans: Iterable, mode: ScanMode, include_licenses: bool = False) -> List[IssueRow]:
    """Rows of the current scans whose (issue id, impacted dependency) never showed up in the previous scans."""
    previous_ids = _unique_ids(previous_scans)
    return [row for row in create_all_issues_rows(current_scans, mode, include_licenses) if row.unique_id not in previous_ids]


def sort_rows(rows: Iterable[IssueRow]) -> List[IssueRow]:
    return sorted(rows, key=lambda r: (SEVERITY_RANK.get(r.severity.lower(), len(SEVERITY_RANK)), r.impacted_dependency_name, r.issue_id))
