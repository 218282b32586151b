import asyncio

from aiohttp import test_utils

import jsonvalid
import sumapi

def _request(app, method, path, **kwargs):
    async def go():
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            response = await client.request(method, path, **kwargs)
            if response.content_type == "application/json":
                return response.status, await response.json()
            return response.status, await response.text()
    return asyncio.run(go())

def test_sum_reports_numbers():
    status, body = _request(sumapi.make_app(), "POST", "/sum", data=b"[1, 2.5, -3, 0, -0.5]")
    assert status == 200
    assert body == {"integers": ["1", "-3", "0"], "floating": ["2.5", "-0.5"]}

def test_sum_without_numbers():
    status, body = _request(sumapi.make_app(), "POST", "/sum", data=b'{"a": [true, null]}')
    assert status == 200
    assert body == {"integers": [], "floating": []}

def test_sum_rejects_invalid_json(capsys):
    status, body = _request(sumapi.make_app(), "POST", "/sum", data=b'{"k":1} garbage')
    assert status == 400
    assert body == {"error": "unexpected tail: 'garbage'", "tail": "garbage"}
    assert "Rejected body from" in capsys.readouterr().out

def test_sum_rejects_empty_body():
    status, body = _request(sumapi.make_app(), "POST", "/sum")
    assert status == 400
    assert body["error"].startswith("cannot parse JSON: cannot parse empty string")
    assert body["tail"] == ""

def test_sum_uses_max_depth():
    app = sumapi.make_app(max_depth=2)
    status, body = _request(app, "POST", "/sum", data=b"[[[1]]]")
    assert status == 400
    assert "exceeded max depth of 2" in body["error"]

def test_sum_rejects_large_body():
    app = sumapi.make_app(max_body_size=16)
    status, _ = _request(app, "POST", "/sum", data=b"[" + b"1," * 50 + b"1]")
    assert status == 413

def test_sum_only_accepts_post():
    status, _ = _request(sumapi.make_app(), "GET", "/sum")
    assert status == 405

def test_unknown_path():
    status, _ = _request(sumapi.make_app(), "POST", "/nope", data=b"[]")
    assert status == 404

def test_unexpected_errors_become_500(monkeypatch, capsys):
    def broken(data, **kwargs):
        raise RuntimeError("boom")
    monkeypatch.setattr(jsonvalid, "validate", broken)
    status, body = _request(sumapi.make_app(), "POST", "/sum", data=b"[]")
    assert status == 500
    assert body == {"error": "RuntimeError('boom')"}
    out, err = capsys.readouterr()
    assert "Error handling POST /sum:" in out
    assert "RuntimeError: boom" in err
