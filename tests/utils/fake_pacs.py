"""In-memory stand-in for the Orthanc REST API, served through httpx.MockTransport."""

import copy
from dataclasses import dataclass, field
from typing import Any

import httpx

PROXY_URL = "http://pacs.test/pacs"
DIRECT_URL = "http://orthanc.test:8042"
PROXY_PREFIX = "/pacs"
DIRECT_HOST = "orthanc.test"

DEMO_PATIENTS: dict[str, dict[str, Any]] = {
    "p1": {
        "ID": "p1",
        "MainDicomTags": {
            "PatientID": "PAT001",
            "PatientName": "DOE^JOHN",
            "PatientBirthDate": "19800101",
            "PatientSex": "M",
        },
        "Studies": ["s1", "s2"],
        "LastUpdate": "20240115T143000",
    },
    "p2": {
        "ID": "p2",
        "MainDicomTags": {"PatientID": "PAT002", "PatientName": "SMITH^JANE", "PatientSex": "F"},
        "Studies": ["s3"],
        "LastUpdate": "20240116T091500",
    },
    "p3": {
        "ID": "p3",
        "MainDicomTags": {"PatientID": "PAT003", "PatientName": "ANONYMOUS"},
        "Studies": [],
        "LastUpdate": "20240117T114500",
    },
}

DEMO_STUDIES: dict[str, dict[str, Any]] = {
    "s1": {
        "ID": "s1",
        "ParentPatient": "p1",
        "MainDicomTags": {
            "StudyInstanceUID": "1.2.3.1",
            "StudyDate": "20240115",
            "StudyTime": "143000",
            "StudyDescription": "Chest CT with Contrast",
            "AccessionNumber": "ACC001",
            "Modality": "CT",
        },
        "Series": ["se1", "se2"],
        "CountInstances": 150,
    },
    "s2": {
        "ID": "s2",
        "ParentPatient": "p1",
        "MainDicomTags": {
            "StudyInstanceUID": "1.2.3.2",
            "StudyDate": "20240118",
            "StudyDescription": "Abdominal Ultrasound",
            "Modality": "US",
        },
        "Series": ["se3"],
        "CountInstances": 85,
    },
    "s3": {
        "ID": "s3",
        "ParentPatient": "p2",
        "MainDicomTags": {
            "StudyInstanceUID": "1.2.3.3",
            "StudyDate": "20240116",
            "StudyDescription": "Brain MRI",
            "Modality": "MR",
        },
        "Series": [],
    },
}

DEMO_SERIES: dict[str, dict[str, Any]] = {
    "se1": {
        "ID": "se1",
        "ParentStudy": "s1",
        "MainDicomTags": {"Modality": "CT", "SeriesDescription": "Axial", "SeriesNumber": "1"},
        "Instances": ["i1", "i2"],
    },
    "se2": {
        "ID": "se2",
        "ParentStudy": "s1",
        "MainDicomTags": {"Modality": "CT", "SeriesDescription": "Coronal", "SeriesNumber": "2"},
        "Instances": ["i3"],
    },
    "se3": {
        "ID": "se3",
        "ParentStudy": "s2",
        "MainDicomTags": {"Modality": "US"},
        "Instances": [],
    },
}


@dataclass
class FakePacs:
    """Orthanc double holding patients, studies and series in dicts.

    ``failing`` holds paths (without the proxy prefix) answered with 500.
    ``down`` makes every call fail at the transport level.
    ``reject_uploads`` makes ``POST /instances`` answer 400, while
    ``garbled_uploads`` makes it answer 200 with an HTML page.
    """

    patients: dict[str, dict[str, Any]] = field(default_factory=dict)
    studies: dict[str, dict[str, Any]] = field(default_factory=dict)
    series: dict[str, dict[str, Any]] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    down: bool = False
    reject_uploads: bool = False
    garbled_uploads: bool = False
    requests: list[httpx.Request] = field(default_factory=list)
    uploads: list[bytes] = field(default_factory=list)
    instances: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def with_demo_data(cls) -> "FakePacs":
        return cls(
            patients=copy.deepcopy(DEMO_PATIENTS),
            studies=copy.deepcopy(DEMO_STUDIES),
            series=copy.deepcopy(DEMO_SERIES),
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(path)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("Connection refused", request=request)

        direct = request.url.host == DIRECT_HOST
        path = request.url.path
        if not direct:
            path = path.removeprefix(PROXY_PREFIX)

        if path in self.failing:
            return httpx.Response(500, json={"Message": "Internal error"})

        if direct and request.headers.get("Authorization") is None:
            return httpx.Response(401, text="Unauthorized")

        match request.method, path.strip("/").split("/"):
            case "GET", ["system"]:
                return httpx.Response(200, json={"Name": "FakeOrthanc", "Version": "1.12.1"})
            case "GET", ["patients"]:
                return httpx.Response(200, json=list(self.patients))
            case "GET", ["patients", patient_id]:
                return self._lookup(self.patients, patient_id)
            case "GET", ["studies"]:
                return httpx.Response(200, json=list(self.studies))
            case "GET", ["studies", study_id]:
                return self._lookup(self.studies, study_id)
            case "GET", ["series"]:
                return httpx.Response(200, json=list(self.series))
            case "GET", ["series", series_id]:
                return self._lookup(self.series, series_id)
            case "GET", ["instances", instance_id]:
                return self._lookup(self.instances, instance_id)
            case "POST", ["instances"] if direct:
                return self._store_instance(request)
            case "DELETE", ["studies", study_id] if direct:
                if self.studies.pop(study_id, None) is None:
                    return httpx.Response(404, json={"Message": "Unknown resource"})
                return httpx.Response(200, json={})
        return httpx.Response(404, json={"Message": "Unknown resource"})

    @staticmethod
    def _lookup(collection: dict[str, dict[str, Any]], key: str) -> httpx.Response:
        if key not in collection:
            return httpx.Response(404, json={"Message": "Unknown resource"})
        return httpx.Response(200, json=collection[key])

    def _store_instance(self, request: httpx.Request) -> httpx.Response:
        if self.reject_uploads or not request.content.startswith(b"DICM"):
            return httpx.Response(400, json={"Message": "Bad file format"})
        if self.garbled_uploads:
            return httpx.Response(200, text="<html>Stored</html>")
        self.uploads.append(request.content)
        instance_id = f"inst-{len(self.uploads)}"
        self.instances[instance_id] = {"ID": instance_id, "FileSize": len(request.content)}
        return httpx.Response(
            200, json={"ID": instance_id, "Path": f"/instances/{instance_id}", "Status": "Success"}
        )
