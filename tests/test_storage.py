import json

from pollerlib.errors import UnexpectedStatusError
from pollerlib.outcome import Cached, Failed, Fresh
from pollerlib.storage import JsonlWriter


def test_jsonl_writer_records_outcomes(tmp_path):
    out = tmp_path / "logs" / "poll.jsonl"
    with JsonlWriter(str(out)) as writer:
        writer.write_outcome("/sdk/latest-all", 200, Fresh(body=b"{}", etag="v1"))
        writer.write_outcome("/sdk/latest-all", 304, Cached(body=b"{}", etag="v1"))
        writer.write_outcome("/sdk/latest-all", 503, Failed(UnexpectedStatusError(503)))

    lines = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert [rec["outcome"] for rec in lines] == ["fresh", "cached", "failed"]
    assert lines[0] == {"path": "/sdk/latest-all", "status": 200, "outcome": "fresh", "etag": "v1", "bytes": 2}
    assert lines[2]["error"] == "Unexpected status code: 503"


def test_jsonl_writer_appends(tmp_path):
    out = tmp_path / "poll.jsonl"
    with JsonlWriter(str(out)) as writer:
        writer.write({"n": 1})
    with JsonlWriter(str(out), append=True) as writer:
        writer.write({"n": 2})
    assert out.read_text(encoding="utf-8").splitlines() == ['{"n": 1}', '{"n": 2}']
