# tests/test_pixlee_service.py
import asyncio
import base64
import hashlib
import hmac
import json
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from pixlee_export.exceptions import PixleeServiceError
from pixlee_export.services.pixlee_service import ALT_REFERER, PixleeService


def make_app(received, album_status=200):
    async def albums(request):
        received.append({
            "path": request.path,
            "query": dict(request.query),
            "headers": dict(request.headers),
            "body": await request.text(),
        })
        return web.json_response({"status": "ok"}, status=album_status)

    async def garbled(request):
        return web.Response(body=b"\xff\xfe\xfa", content_type="application/json", charset="utf-8")

    async def countries(request):
        received.append({"path": request.path, "query": dict(request.query)})
        return web.json_response({"US": {"CurrencyCode": "USD"}, "FR": {"CurrencyCode": "EUR"}})

    async def notify(request):
        received.append({"path": request.path, "body": await request.json()})
        return web.json_response({})

    app = web.Application()
    app.router.add_post("/api/v2/albums", albums)
    app.router.add_get("/api/v1/getSFCountryMap", countries)
    app.router.add_post("/api/v1/notifyExportStatus", notify)
    app.router.add_get("/api/v1/garbled", garbled)
    return app


def run_with_server(site, scenario, album_status=200):
    received = []

    async def run():
        async with TestServer(make_app(received, album_status)) as server:
            service_site = site.model_copy(update={"api_url": str(server.make_url("/api/"))})
            return await scenario(PixleeService(service_site))

    return asyncio.run(run()), received


def test_build_url_uses_api_key(site):
    service = PixleeService(site.model_copy(update={"api_url": "https://api.example.com/api"}))
    assert service.build_url("v2/albums") == "https://api.example.com/api/v2/albums?api_key=public-key"
    assert service.build_url("/v1/x", "a=b") == "https://api.example.com/api/v1/x?a=b"


def test_post_product_is_signed(site):
    payload = {"title": "Shirt", "product": {"sku": "shirt-1"}}
    result, received = run_with_server(site, lambda service: service.post_product(payload))

    assert result.ok
    assert result.status == 200
    request = received[0]
    assert request["query"] == {"api_key": "public-key"}
    assert request["headers"]["X-Alt-Referer"] == ALT_REFERER
    assert request["headers"]["Content-Type"] == "application/json"
    assert json.loads(request["body"]) == payload

    expected = base64.b64encode(
        hmac.new(b"secret", request["body"].encode(), hashlib.sha256).digest()
    ).decode()
    assert request["headers"]["Signature"] == expected


def test_post_product_raises_on_error_status(site):
    async def scenario(service):
        with pytest.raises(PixleeServiceError) as excinfo:
            await service.post_product({"title": "Shirt"})
        return excinfo.value

    error, _ = run_with_server(site, scenario, album_status=500)
    assert error.status == 500


def test_get_countries_map(site):
    countries, received = run_with_server(site, lambda service: service.get_countries_map())
    assert countries["FR"]["CurrencyCode"] == "EUR"
    assert received[0]["path"] == "/api/v1/getSFCountryMap"


def test_notify_export_status(site):
    result, received = run_with_server(
        site, lambda service: service.notify_export_status("started", "job-1", None)
    )
    assert result.ok
    assert received[0]["body"] == {
        "api_key": "public-key",
        "status": "started",
        "job_id": "job-1",
        "num_products": None,
        "platform": "demandware",
    }


def test_connection_failure_gives_failed_result(site):
    service = PixleeService(site.model_copy(update={"api_url": "http://127.0.0.1:1/api/"}), timeout=2)
    result = asyncio.run(service.call("v1/getSFCountryMap"))
    assert not result.ok
    assert result.error_message


def test_call_requires_endpoint(site):
    with pytest.raises(ValueError):
        asyncio.run(PixleeService(site).call(""))


def test_undecodable_body_gives_result(site):
    result, _ = run_with_server(site, lambda service: service.call("v1/garbled"))

    assert result.ok
    assert "\ufffd" in result.text
    with pytest.raises(ValueError):
        result.parse_json()
