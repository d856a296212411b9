from dataclasses import dataclass


ALL_DATA_PATH = "/sdk/latest-all"


@dataclass(frozen=True)
class VersionedDataKind:
    namespace: str
    request_path: str


FEATURES = VersionedDataKind(namespace="features", request_path="/sdk/latest-flags/")
SEGMENTS = VersionedDataKind(namespace="segments", request_path="/sdk/latest-segments/")
