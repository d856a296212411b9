import json
import threading
from typing import Dict, Optional
from pathlib import Path

from .outcome import Cached, Failed, Outcome


def outcome_record(resource_path: str, status: Optional[int], outcome: Outcome) -> Dict:
    record: Dict = {"path": resource_path, "status": status}
    if isinstance(outcome, Failed):
        record.update(outcome="failed", error=str(outcome.error), etag=None, bytes=0)
    elif isinstance(outcome, Cached):
        record.update(outcome="cached", etag=outcome.etag, bytes=len(outcome.body))
    else:
        record.update(outcome="fresh", etag=outcome.etag, bytes=len(outcome.body))
    return record


class JsonlWriter:
    def __init__(self, output_path: str, append: bool = False) -> None:
        self.output_path = output_path
        self._lock = threading.Lock()
        out_path = Path(self.output_path)
        if out_path.parent:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if append else "w"
        self._fh = out_path.open(mode, encoding="utf-8")

    def write(self, record: Dict) -> None:
        line = json.dumps(record, ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()

    def write_outcome(self, resource_path: str, status: Optional[int], outcome: Outcome) -> None:
        self.write(outcome_record(resource_path, status, outcome))

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.flush()
                self._fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
