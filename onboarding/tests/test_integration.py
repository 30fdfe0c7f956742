"""End-to-end tests: text in, accounts out.

These run the real ingestion, review and provisioning stages with stub
extraction and account backends, and drive the CLI's onboard() coroutine
with those stubs patched in.
"""

import json

import pytest

from onboarding import cli
from onboarding.core import ExtractionServiceError, ServiceFailureKind
from onboarding.core.config import API_KEY_ENV_VAR
from onboarding.pydantic_models import ResultSource
from onboarding.stages import WizardStep
from onboarding.wizard import WizardController


class TestWizardFlow:
    """Full wizard runs against stub services."""

    @pytest.mark.asyncio
    async def test_two_names_two_accounts(self, stub_service, make_response, account_service, credentials, mock_logger):
        service = stub_service(make_response([("Jane", "Doe"), ("John", "Smith")], confidence=0.9))
        wizard = WizardController(service, account_service, credentials=credentials, logger=mock_logger)

        wizard.select_create_new()
        await wizard.submit_text("Jane Doe\nJohn Smith")
        assert wizard.step == WizardStep.REVIEW
        assert [r.username for r in wizard.roster] == ["janed", "johns"]
        assert wizard.advance()

        summary = await wizard.run_provisioning()
        assert (summary.completed_count, summary.error_count) == (2, 0)
        assert wizard.orchestrator.downloads_ready
        assert account_service.max_in_flight == 1

    @pytest.mark.asyncio
    async def test_fallback_end_to_end(self, stub_service, account_service, credentials, mock_logger):
        service = stub_service(error=ExtractionServiceError(ServiceFailureKind.OTHER, "503"))
        wizard = WizardController(service, account_service, credentials=credentials, logger=mock_logger)

        wizard.select_create_new()
        result = await wizard.submit_text("Doe, Jane\nJohn Smith")
        assert result.source == ResultSource.HEURISTIC
        assert [r.first_name for r in result.records] == ["Jane", "John"]
        assert all(r.confidence == 0.5 for r in result.records)

        wizard.accept_pending()
        assert wizard.advance()
        summary = await wizard.run_provisioning()
        assert summary.all_succeeded

    @pytest.mark.asyncio
    async def test_edit_then_provision_uses_edits(self, stub_service, make_response, account_service, credentials, mock_logger):
        service = stub_service(make_response([("Jane", "Doe")], confidence=0.9))
        wizard = WizardController(service, account_service, credentials=credentials, logger=mock_logger)
        wizard.select_create_new()
        await wizard.submit_text("Jane Doe")
        record = wizard.roster[0]
        wizard.update_record(record.id, first_name="Janet")
        wizard.advance()
        await wizard.run_provisioning()
        assert wizard.orchestrator.completed_records()[0].username == "janetd"


class TestCli:
    """Tests for cli.onboard with stubbed services."""

    @pytest.fixture
    def patched_cli(self, monkeypatch, stub_service, account_service):
        """Patch the CLI's service constructors; returns a setter for the extraction stub."""
        holder = {}
        monkeypatch.setattr(cli, "LLMExtractionService", lambda client, model=None: holder["service"])
        monkeypatch.setattr(cli, "SimulatedAccountService", lambda **kwargs: account_service)

        def _set(**kwargs):
            holder["service"] = stub_service(**kwargs)
        return _set

    @pytest.mark.asyncio
    async def test_text_to_sheets(self, patched_cli, make_response, monkeypatch, tmp_path):
        monkeypatch.setenv(API_KEY_ENV_VAR, "test-key")
        patched_cli(response=make_response([("Jane", "Doe"), ("John", "Smith")], confidence=0.9))

        session = await cli.onboard(
            text="Jane Doe\nJohn Smith",
            output_dir=str(tmp_path),
            assume_yes=True,
            sheets=True,
            seed=7,
        )

        assert session["provisioning"]["completed_count"] == 2
        assert session["provisioning"]["error_count"] == 0
        assert len(list((tmp_path / "sheets").glob("*.html"))) == 3
        [summary_file] = (tmp_path / "json").glob("onboarding_*.json")
        saved = json.loads(summary_file.read_text())
        assert [r["username"] for r in saved["roster"]] == ["janed", "johns"]

    @pytest.mark.asyncio
    async def test_missing_key_without_fallback_stops(self, patched_cli, monkeypatch, tmp_path):
        monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
        patched_cli()
        session = await cli.onboard(text="Jane Doe", output_dir=str(tmp_path), use_fallback=False)
        assert session is None

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        assert await cli.onboard(source=str(tmp_path / "nope.txt"), output_dir=str(tmp_path)) is None

    @pytest.mark.asyncio
    async def test_declined_confirmation(self, patched_cli, make_response, monkeypatch, tmp_path):
        monkeypatch.setenv(API_KEY_ENV_VAR, "test-key")
        monkeypatch.setattr("builtins.input", lambda prompt: "n")
        patched_cli(response=make_response([("Jane", "Doe")], confidence=0.3))
        session = await cli.onboard(text="Jane Doe", output_dir=str(tmp_path))
        assert session is None
