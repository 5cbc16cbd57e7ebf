from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from utils.errors import MalformedScanResultError


class ScanMode(str, Enum):
    VIOLATIONS = "violations"
    VULNERABILITIES = "vulnerabilities"


@dataclass(frozen=True)
class Cve:
    id: str


@dataclass(frozen=True)
class ImpactPathNode:
    component_id: str


@dataclass(frozen=True)
class Component:
    fixed_versions: Tuple[str, ...] = ()
    impact_paths: Tuple[Tuple[ImpactPathNode, ...], ...] = ()


@dataclass(frozen=True)
class Vulnerability:
    issue_id: str
    summary: str = ""
    severity: str = ""
    components: Optional[Dict[str, Component]] = field(default_factory=dict)
    cves: Tuple[Cve, ...] = ()


@dataclass(frozen=True)
class Violation(Vulnerability):
    violation_type: str = "security"


@dataclass(frozen=True)
class ScanResult:
    violations: Tuple[Violation, ...] = ()
    vulnerabilities: Tuple[Vulnerability, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "ScanResult":
        """Build a scan result from one Xray scan response object."""
        _expect(data, dict, "scan response")
        return cls(
            violations=tuple(_parse_violation(v) for v in _expect(data.get("violations") or [], list, "violations")),
            vulnerabilities=tuple(_parse_vulnerability(v) for v in _expect(data.get("vulnerabilities") or [], list, "vulnerabilities")),
        )


def parse_scan_results(data) -> List[ScanResult]:
    """Accept either a single scan response or a list of them."""
    if isinstance(data, dict):
        return [ScanResult.from_dict(data)]
    if isinstance(data, list):
        return [ScanResult.from_dict(item) for item in data]
    raise MalformedScanResultError(f"unexpected scan output of type {type(data).__name__}")


def _expect(value, kind, what):
    if not isinstance(value, kind):
        raise MalformedScanResultError(f"expected {what} to be a {kind.__name__}, got {type(value).__name__}")
    return value


def _parse_cves(raw) -> Tuple[Cve, ...]:
    cves = []
    for cve in _expect(raw or [], list, "cves"):
        _expect(cve, dict, "cve entry")
        cve_id = cve.get("cve") or cve.get("id")
        if cve_id:
            cves.append(Cve(id=cve_id))
    return tuple(cves)


def _parse_impact_path(path) -> Tuple[ImpactPathNode, ...]:
    return tuple(
        ImpactPathNode(component_id=_expect(node, dict, "impact path node").get("component_id", ""))
        for node in _expect(path, list, "impact path")
    )


def _parse_components(raw) -> Optional[Dict[str, Component]]:
    # None is kept as None so the delta engine can flag a finding without components
    if raw is None:
        return None
    components = {}
    for component_id, details in _expect(raw, dict, "components").items():
        details = _expect(details or {}, dict, f"component {component_id}")
        paths = tuple(_parse_impact_path(path) for path in _expect(details.get("impact_paths") or [], list, "impact_paths"))
        fixed_versions = _expect(details.get("fixed_versions") or [], list, "fixed_versions")
        components[component_id] = Component(fixed_versions=tuple(fixed_versions), impact_paths=paths)
    return components


def _parse_vulnerability(raw) -> Vulnerability:
    _expect(raw, dict, "vulnerability")
    return Vulnerability(
        issue_id=raw.get("issue_id", ""),
        summary=raw.get("summary", ""),
        severity=raw.get("severity", ""),
        components=_parse_components(raw.get("components")),
        cves=_parse_cves(raw.get("cves")),
    )


def _parse_violation(raw) -> Violation:
    _expect(raw, dict, "violation")
    return Violation(
        issue_id=raw.get("issue_id", ""),
        summary=raw.get("summary", ""),
        severity=raw.get("severity", ""),
        components=_parse_components(raw.get("components")),
        cves=_parse_cves(raw.get("cves")),
        violation_type=raw.get("type", "security"),
    )
