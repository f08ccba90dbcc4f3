"""Tests for carrier drivers."""

import pytest

from shipping_gateway.config import MelhorEnvioConfig, CorreiosConfig
from shipping_gateway.drivers import MelhorEnvioDriver, CorreiosDriver
from shipping_gateway.transport import HttpClient

from conftest import FakeHttpClient


class TestDefaultHeaders:
    """Tests for header shaping."""

    def test_token_adds_bearer(self, me_config):
        """Test the token becomes a bearer header."""
        driver = MelhorEnvioDriver(me_config, http=FakeHttpClient())

        headers = driver.with_default_headers({})

        assert headers == {
            "Accept": "application/json",
            "Authorization": "Bearer test-token",
        }

    def test_existing_headers_kept(self, me_config):
        """Test caller headers are not overwritten."""
        driver = MelhorEnvioDriver(me_config, http=FakeHttpClient())

        headers = driver.with_default_headers({
            "Accept": "application/pdf",
            "Authorization": "Bearer other",
        })

        assert headers["Accept"] == "application/pdf"
        assert headers["Authorization"] == "Bearer other"

    def test_no_token_no_auth(self):
        """Test no Authorization header without a token."""
        driver = MelhorEnvioDriver(MelhorEnvioConfig(token=""), http=FakeHttpClient())

        assert "Authorization" not in driver.with_default_headers({})

    @pytest.mark.asyncio
    async def test_headers_on_every_request(self, me_config, sleep, shipment, happy_path_responses):
        """Test default headers reach every request."""
        http = FakeHttpClient(happy_path_responses)
        driver = MelhorEnvioDriver(me_config, http=http, sleep=sleep)

        await driver.issue_label(shipment)

        assert len(http.requests) == 5
        for request in http.requests:
            assert request.headers["Accept"] == "application/json"
            assert request.headers["Authorization"] == "Bearer test-token"


class TestMelhorEnvioDriver:
    """Tests for MelhorEnvioDriver."""

    def test_production_base_uri(self):
        """Test the production base URI is used by default."""
        driver = MelhorEnvioDriver(MelhorEnvioConfig())

        assert isinstance(driver.http, HttpClient)
        assert driver.http.base_uri == "https://www.melhorenvio.com.br/api/v2/"
        assert driver.get_carrier_name() == "melhor_envio"

    def test_sandbox_base_uri(self):
        """Test the sandbox base URI when enabled."""
        driver = MelhorEnvioDriver(MelhorEnvioConfig(
            use_sandbox=True,
            sandbox_base_uri="https://sandbox.melhorenvio.test/api/v2",
        ))

        assert driver.http.base_uri == "https://sandbox.melhorenvio.test/api/v2/"
        assert driver.http.url_for("me/cart") == "https://sandbox.melhorenvio.test/api/v2/me/cart"

    @pytest.mark.asyncio
    async def test_quote(self, me_config, shipment):
        """Test quoting through the driver."""
        http = FakeHttpClient([{"data": [{"service_name": "PAC", "price": 20, "delivery_time": 6}]}])
        driver = MelhorEnvioDriver(me_config, http=http)

        rates = await driver.quote(shipment)

        assert [(r.service, r.price, r.estimated_days) for r in rates] == [("PAC", 20.0, 6)]

    @pytest.mark.asyncio
    async def test_print_label_alias_runs_full_flow(self, me_config, sleep, shipment, happy_path_responses):
        """Test print_label runs the whole issuance."""
        http = FakeHttpClient(happy_path_responses + happy_path_responses)
        driver = MelhorEnvioDriver(me_config, http=http, sleep=sleep)

        issued = await driver.issue_label(shipment)
        printed = await driver.print_label(shipment)

        assert issued.tracking_code == printed.tracking_code == "XX123456BR"
        assert len(http.requests) == 10
        assert http.paths().count("me/cart") == 2

    @pytest.mark.asyncio
    async def test_track_not_supported(self, me_config):
        """Test tracking is reported as unsupported."""
        driver = MelhorEnvioDriver(me_config, http=FakeHttpClient())

        with pytest.raises(NotImplementedError):
            await driver.track("XX123456BR")

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self, me_config):
        """Test leaving the context closes the client."""
        http = FakeHttpClient()

        async with MelhorEnvioDriver(me_config, http=http):
            pass

        assert http.closed


class TestCorreiosDriver:
    """Tests for the Correios stub."""

    @pytest.mark.asyncio
    async def test_quote_is_empty(self, shipment):
        """Test the stub returns no offers."""
        http = FakeHttpClient()
        driver = CorreiosDriver(CorreiosConfig(), http=http)

        assert await driver.quote(shipment) == []
        assert http.requests == []

    @pytest.mark.asyncio
    async def test_labels_not_supported(self, shipment):
        """Test label operations are unsupported."""
        driver = CorreiosDriver(CorreiosConfig(), http=FakeHttpClient())

        with pytest.raises(NotImplementedError):
            await driver.issue_label(shipment)
        with pytest.raises(NotImplementedError):
            await driver.print_label(shipment)
        with pytest.raises(NotImplementedError):
            await driver.track("XX")
