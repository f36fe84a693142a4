"""
Tests for the Replicate gateway: output extraction, URL rewriting and error mapping.
"""
from unittest.mock import MagicMock

import httpx
import pytest
from replicate.exceptions import ReplicateException

from core.exceptions import InvalidModelOutput, ProviderError
from services.replicate_service import ReplicateGateway, extract_result_url, resolve_public_url

RESULT = "http://x/img.png"


class TestExtractResultUrl:
    @pytest.mark.parametrize("output", [RESULT, [RESULT], (RESULT, "http://x/other.png"), {"output": RESULT}])
    def test_supported_shapes(self, output):
        assert extract_result_url(output) == RESULT

    def test_output_key_wins_over_url_key(self):
        assert extract_result_url({"url": "http://x/url.png", "output": RESULT}) == RESULT

    def test_url_key_wins_over_scanned_values(self):
        assert extract_result_url({"image": "http://x/scan.png", "url": RESULT}) == RESULT

    def test_scans_for_first_http_value(self):
        assert extract_result_url({"status": "succeeded", "image": RESULT}) == RESULT

    def test_file_output_objects_are_read_through_url(self):
        file_output = MagicMock(url=RESULT)
        assert extract_result_url([file_output]) == RESULT

    @pytest.mark.parametrize("output", [{"foo": 1}, [], None, 42])
    def test_unusable_output_raises_with_payload(self, output):
        with pytest.raises(InvalidModelOutput) as exc_info:
            extract_result_url(output)
        assert exc_info.value.payload == output

    @pytest.mark.parametrize("output", ["", "/relative/img.png", ["ftp://x/img.png"], {"output": "data:image/png"}])
    def test_non_http_result_is_rejected(self, output):
        with pytest.raises(InvalidModelOutput):
            extract_result_url(output)


class TestResolvePublicUrl:
    def test_no_base_is_a_noop(self):
        assert resolve_public_url("http://localhost:5000/uploads/a.png", None) == "http://localhost:5000/uploads/a.png"

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:5000/uploads/a.png",
            "http://127.0.0.1:8000/uploads/a.png",
            "https://localhost/uploads/a.png",
            "/uploads/a.png",
        ],
    )
    def test_loopback_and_relative_urls_move_to_public_base(self, url):
        assert resolve_public_url(url, "https://pub.example.com/") == "https://pub.example.com/uploads/a.png"

    @pytest.mark.parametrize(
        "url",
        [
            "https://cdn.example.com/a.png",
            "http://localhost.evil.com/uploads/a.png",
            "http://127.0.0.1.nip.io/uploads/a.png",
            "http://localhostfoo:8000/uploads/a.png",
        ],
    )
    def test_public_urls_are_left_alone(self, url):
        assert resolve_public_url(url, "https://pub.example.com") == url

    def test_bare_loopback_host_is_rewritten(self):
        assert resolve_public_url("http://localhost:5000", "https://pub.example.com") == "https://pub.example.com"


class TestGatewayCalls:
    @pytest.mark.asyncio
    async def test_inpaint_sends_flux_inputs(self, gateway):
        gateway._client.run.return_value = ["http://result/b.png"]

        result = await gateway.inpaint("http://x/a.png", "http://x/m.png", "prompt", prompt_strength=0.4, mask_blur=1)

        assert result == "http://result/b.png"
        model, = gateway._client.run.call_args.args
        sent = gateway._client.run.call_args.kwargs["input"]
        assert model == "black-forest-labs/flux-fill-pro"
        assert sent["image"] == "http://x/a.png"
        assert sent["mask"] == "http://x/m.png"
        assert sent["prompt_strength"] == 0.4
        assert sent["mask_blur"] == 1
        assert 0 <= sent["seed"] <= 999999

    @pytest.mark.asyncio
    async def test_recolor_sends_sdxl_inputs(self, gateway):
        gateway._client.run.return_value = {"output": "http://result/c.png"}

        result = await gateway.recolor("http://x/a.png", "red fabric cushion")

        assert result == "http://result/c.png"
        assert gateway._client.run.call_args.args == ("stability-ai/sdxl",)
        sent = gateway._client.run.call_args.kwargs["input"]
        assert sent["negative_prompt"]
        assert sent["num_outputs"] == 1

    @pytest.mark.asyncio
    async def test_provider_exception_becomes_provider_error(self, gateway):
        gateway._client.run.side_effect = ReplicateException("model crashed")

        with pytest.raises(ProviderError) as exc_info:
            await gateway.inpaint("http://x/a.png", "http://x/m.png", "prompt")

        assert "model crashed" in exc_info.value.error
        assert gateway._client.run.call_count == 1  # no retry

    @pytest.mark.asyncio
    async def test_network_error_becomes_provider_error(self, gateway):
        gateway._client.run.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ProviderError):
            await gateway.recolor("http://x/a.png", "prompt")

    def test_segmentation_model_choice(self, gateway):
        assert gateway.segmentation_model(auto_segment=False) == "meta/sam-2"
        assert gateway.segmentation_model(auto_segment=True) == "schananas/grounded_sam"


class TestDiagnostics:
    @pytest.mark.asyncio
    async def test_check_connection_without_token(self):
        gateway = ReplicateGateway(api_token="")

        with pytest.raises(ProviderError) as exc_info:
            await gateway.check_connection()

        assert exc_info.value.message == "Replicate API token not configured"

    @pytest.mark.asyncio
    async def test_check_connection_counts_models(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer r8_token"
            return httpx.Response(200, json={"results": [{"name": "a"}, {"name": "b"}]})

        gateway = ReplicateGateway(api_token="r8_token", http_transport=httpx.MockTransport(handler))

        result = await gateway.check_connection()

        assert result == {"message": "Replicate API is working", "modelsCount": 2, "tokenConfigured": True}

    @pytest.mark.asyncio
    async def test_check_connection_non_2xx(self):
        gateway = ReplicateGateway(
            api_token="r8_token",
            http_transport=httpx.MockTransport(lambda request: httpx.Response(401)),
        )

        with pytest.raises(ProviderError) as exc_info:
            await gateway.check_connection()

        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_check_model_available(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/models/black-forest-labs/flux-fill-pro"
            return httpx.Response(
                200, json={"name": "flux-fill-pro", "description": "Inpainting", "visibility": "public"}
            )

        gateway = ReplicateGateway(api_token="r8_token", http_transport=httpx.MockTransport(handler))

        result = await gateway.check_model("black-forest-labs", "flux-fill-pro")

        assert result == {
            "available": True,
            "model": "flux-fill-pro",
            "description": "Inpainting",
            "visibility": "public",
        }

    @pytest.mark.asyncio
    async def test_check_model_missing(self):
        gateway = ReplicateGateway(
            api_token="r8_token",
            http_transport=httpx.MockTransport(lambda request: httpx.Response(404)),
        )

        result = await gateway.check_model("nobody", "nothing")

        assert result["available"] is False
        assert result["model"] == "nobody/nothing"
        assert result["status"] == 404
