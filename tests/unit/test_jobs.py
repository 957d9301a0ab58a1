"""Tests for the background job driver."""

import pytest

import canonical_log
from canonical_log import Settings, binding
from canonical_log.integrations import canonical_job, job_scope
from tests.helpers import RecordingSink


@pytest.fixture
def job_settings(sink: RecordingSink) -> Settings:
    """Sampling that would drop every ordinary request."""
    return Settings(sinks=[sink], sample_rate=0.0)


class TestJobScope:
    """Tests for the job_scope context manager."""

    def test_always_emits_regardless_of_sampling(
        self, job_settings: Settings, sink: RecordingSink
    ) -> None:
        with job_scope("ReindexJob", queue="search", job_id="j-1", settings=job_settings):
            canonical_log.set("documents", 12)

        assert len(sink.records) == 1
        record = sink.records[0]
        assert record["job_class"] == "ReindexJob"
        assert record["queue"] == "search"
        assert record["job_id"] == "j-1"
        assert record["documents"] == 12
        assert record["message"] == "ReindexJob"

    def test_generates_job_id(self, job_settings: Settings, sink: RecordingSink) -> None:
        with job_scope("ReindexJob", settings=job_settings):
            pass

        assert len(sink.records[0]["job_id"]) == 32
        assert sink.records[0]["queue"] == "default"

    def test_records_and_reraises_errors(
        self, job_settings: Settings, sink: RecordingSink
    ) -> None:
        with pytest.raises(ConnectionError, match="smtp down"):
            with job_scope("SendInvoiceJob", settings=job_settings):
                raise ConnectionError("smtp down")

        assert sink.records[0]["error"] == {"class": "ConnectionError", "message": "smtp down"}

    def test_restores_outer_request_binding(self, job_settings: Settings) -> None:
        """A job run inline keeps its fields out of the surrounding request's event."""
        request_event = binding.init()
        with job_scope("InlineJob", settings=job_settings) as job_event:
            canonical_log.set("inside_job", True)

        assert binding.current() is request_event
        assert "inside_job" not in request_event.fields
        assert job_event.fields["inside_job"] is True


class TestCanonicalJobDecorator:
    """Tests for @canonical_job."""

    def test_sync_job(self, job_settings: Settings, sink: RecordingSink) -> None:
        @canonical_job("SendInvoiceJob", queue="mailers", settings=job_settings)
        def send_invoice(invoice_id: int) -> str:
            canonical_log.set("invoice_id", invoice_id)
            return "sent"

        assert send_invoice(7) == "sent"
        assert send_invoice.__name__ == "send_invoice"
        record = sink.records[0]
        assert record["job_class"] == "SendInvoiceJob"
        assert record["queue"] == "mailers"
        assert record["invoice_id"] == 7

    def test_bare_decorator_uses_qualname(self, sink: RecordingSink) -> None:
        canonical_log.configure(sinks=[sink], sample_rate=0.0)

        @canonical_job
        def nightly_cleanup() -> None:
            pass

        nightly_cleanup()

        assert sink.records[0]["job_class"].endswith("nightly_cleanup")

    def test_each_call_gets_its_own_line(
        self, job_settings: Settings, sink: RecordingSink
    ) -> None:
        @canonical_job("CounterJob", settings=job_settings)
        def work() -> None:
            canonical_log.increment("runs")

        work()
        work()

        assert [record["runs"] for record in sink.records] == [1, 1]

    @pytest.mark.asyncio
    async def test_async_job(self, job_settings: Settings, sink: RecordingSink) -> None:
        @canonical_job("AsyncJob", settings=job_settings)
        async def fetch() -> None:
            canonical_log.set("fetched", True)
            raise TimeoutError("upstream slow")

        with pytest.raises(TimeoutError):
            await fetch()

        record = sink.records[0]
        assert record["fetched"] is True
        assert record["error"]["class"] == "TimeoutError"
