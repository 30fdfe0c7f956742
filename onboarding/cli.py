"""CLI entrypoint for roster onboarding."""

import argparse
import asyncio
import json
import logging
import os
import sys
import warnings
from datetime import datetime
from pathlib import Path

# Suppress LiteLLM's direct prints (must be before import)
os.environ["LITELLM_LOG"] = "ERROR"

warnings.filterwarnings("ignore", message="Pydantic serializer warnings")
warnings.filterwarnings("ignore", category=UserWarning, module="pydantic")
warnings.filterwarnings("ignore", message="Unclosed client session")
warnings.filterwarnings("ignore", category=ResourceWarning)

# Suppress noisy loggers (HTTP clients, LiteLLM internals)
for logger_name in ["httpx", "httpcore", "litellm", "LiteLLM",
                    "LiteLLM Router", "aiohttp", "asyncio"]:
    logging.getLogger(logger_name).setLevel(logging.ERROR)

import litellm  # noqa: E402 - must be after LITELLM_LOG
from dotenv import load_dotenv  # noqa: E402

# Provider settings are read from the environment at import time
load_dotenv()

from onboarding.core.config import EXTRACTION_MODEL, LLM_PROVIDER, API_KEY_ENV_VAR, ProvisioningConfig  # noqa: E402
from onboarding.core import CostTracker, CredentialGenerator, LLMClient, build_router, get_logger  # noqa: E402
from onboarding.export import write_credential_sheets  # noqa: E402
from onboarding.pydantic_models import ResultSource  # noqa: E402
from onboarding.services import LLMExtractionService, SimulatedAccountService  # noqa: E402
from onboarding.stages import WizardStep, gate_reasons  # noqa: E402
from onboarding.wizard import WizardController  # noqa: E402

litellm.suppress_debug_info = True


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _print_result(result) -> None:
    for warning in result.warnings:
        print(f"  [WARN] {warning}")
    for error in result.errors:
        print(f"  [ERROR] {error}")


def _print_roster(records) -> None:
    print(f"\n  {'Name':<24}{'Username':<20}{'Password':<16}")
    for r in records:
        print(f"  {r.display_name:<24}{(r.username or ''):<20}{r.password:<16}")
    print()


async def onboard(
    source: str | None = None,
    text: str | None = None,
    output_dir: str = "outputs",
    assume_yes: bool = False,
    retry_failed: bool = False,
    sheets: bool = False,
    use_fallback: bool = True,
    model: str | None = None,
    failure_rate: float = ProvisioningConfig.SIMULATED_FAILURE_RATE,
    seed: int | None = None,
    verbose: bool = False,
) -> dict | None:
    """Run one onboarding session end to end.

    Args:
        source: Path to a roster file (read as text whatever its extension).
        text: Roster text, used instead of a file.
        output_dir: Directory for the JSON summary, logs and sheets.
        assume_yes: Accept results that need confirmation without asking.
        retry_failed: Retry failed accounts once more after the batch.
        sheets: Write HTML credential sheets for created accounts.
        use_fallback: Use basic parsing when the AI service fails.
        model: Extraction model (provider-qualified).
        failure_rate: Failure probability of the simulated account backend.
        seed: Seed for credentials and the simulated backend.
        verbose: Verbose output.

    Returns:
        The session summary dict, or None if nothing was provisioned.
    """
    if source is None and text is None:
        print("Error: give a roster file or --text")
        return None
    if source is not None and not Path(source).exists():
        print(f"Error: File not found: {source}")
        return None

    api_key = os.environ.get(API_KEY_ENV_VAR)
    if not api_key:
        if not use_fallback:
            print(f"Error: {API_KEY_ENV_VAR} not set")
            if LLM_PROVIDER == "azure":
                print("For Azure, set: AZURE_API_KEY, AZURE_API_BASE, AZURE_API_VERSION")
            else:
                print(f"Set it in .env or export {API_KEY_ENV_VAR}=...")
            return None
        print(f"  [WARN] {API_KEY_ENV_VAR} not set; names will be read with basic parsing")

    output_dir = Path(output_dir)
    json_dir = output_dir / "json"
    logs_dir = output_dir / "logs"
    json_dir.mkdir(parents=True, exist_ok=True)

    resolved_model = model or EXTRACTION_MODEL
    logger = get_logger(verbose=verbose, log_dir=logs_dir)
    logger.start_session(Path(source).name if source else "pasted text")
    logger.info(f"Provider: {LLM_PROVIDER}, model: {resolved_model}")

    cost_tracker = CostTracker()
    client = LLMClient(build_router(api_key=api_key or "", model=resolved_model), cost_tracker=cost_tracker)
    wizard = WizardController(
        LLMExtractionService(client, model=resolved_model),
        SimulatedAccountService(failure_rate=failure_rate, seed=seed),
        credentials=CredentialGenerator(seed=seed),
        use_fallback=use_fallback,
        logger=logger,
    )

    wizard.select_create_new()
    if source is not None:
        result = await wizard.submit_file(source)
    else:
        result = await wizard.submit_text(text)
    _print_result(result)

    if wizard.step == WizardStep.INPUT:
        if not result.has_records:
            logger.end_session(success=False)
            return None
        _print_roster(result.records)
        reasons = gate_reasons(result.content_type, result.confidence, result.records)
        if result.source == ResultSource.HEURISTIC:
            reasons.append("Names were read with basic parsing")
        for reason in reasons:
            print(f"  [CHECK] {reason}")
        if assume_yes or _confirm(f"Continue with these {len(result.records)} names?"):
            wizard.accept_pending()
        else:
            wizard.reject_pending()
            logger.end_session(success=False)
            return None
    else:
        _print_roster(wizard.roster)

    if not wizard.advance():
        for message in wizard.validation_messages():
            print(f"  [INVALID] {message}")
        logger.end_session(success=False)
        return None

    summary = await wizard.run_provisioning()
    if retry_failed and summary.error_count:
        logger.milestone(f"Retrying {summary.error_count} failed accounts")
        summary = await wizard.retry_failed()

    session = wizard.to_dict()
    session["cost"] = cost_tracker.to_dict()
    output_file = json_dir / f"onboarding_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    with open(output_file, "w") as f:
        json.dump(session, f, indent=2, ensure_ascii=False)
    print(f"\n[OUTPUT] {output_file}")

    if sheets:
        written = write_credential_sheets(wizard.orchestrator.completed_records(), output_dir / "sheets")
        if written:
            print(f"[SHEETS] {output_dir / 'sheets'} ({len(written)} files)")

    if cost_tracker.call_count > 0:
        print(f"\n{cost_tracker.summary()}")

    logger.end_session(
        success=summary.all_succeeded,
        stats={
            "accounts": summary.total,
            "completed": summary.completed_count,
            "errors": summary.error_count,
        },
    )
    return session


def main():
    parser = argparse.ArgumentParser(
        description="Bulk student onboarding from an unstructured roster",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  onboard class_list.txt
  onboard --text "Jane Doe, John Smith" --yes
  onboard --sheets --retry-failed roster.csv
        """,
    )
    parser.add_argument("file", nargs="?", help="Roster file (any extension, read as text)")
    parser.add_argument("-t", "--text", help="Roster text instead of a file")
    parser.add_argument(
        "-o", "--output",
        default="outputs",
        help="Output directory (default: outputs)",
    )
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Accept results that need confirmation without asking",
    )
    parser.add_argument(
        "--retry-failed",
        action="store_true",
        help="Retry failed accounts once more after the batch",
    )
    parser.add_argument(
        "--sheets",
        action="store_true",
        help="Write printable HTML credential sheets",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Fail instead of using basic parsing when the AI service is unavailable",
    )
    parser.add_argument(
        "--model",
        default=None,
        help=f"Extraction model. Default: {EXTRACTION_MODEL}",
    )
    parser.add_argument(
        "--failure-rate",
        type=float,
        default=ProvisioningConfig.SIMULATED_FAILURE_RATE,
        help=f"Simulated backend failure rate (default: {ProvisioningConfig.SIMULATED_FAILURE_RATE})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with DEBUG level logging",
    )

    args = parser.parse_args()
    if args.file is None and args.text is None:
        parser.error("give a roster file or --text")

    session = asyncio.run(onboard(
        source=args.file,
        text=args.text,
        output_dir=args.output,
        assume_yes=args.yes,
        retry_failed=args.retry_failed,
        sheets=args.sheets,
        use_fallback=not args.no_fallback,
        model=args.model,
        failure_rate=args.failure_rate,
        seed=args.seed,
        verbose=args.verbose,
    ))

    provisioning = (session or {}).get("provisioning") or {}
    all_done = bool(provisioning.get("total")) and provisioning.get("completed_count") == provisioning.get("total")
    sys.exit(0 if all_done else 1)


if __name__ == "__main__":
    main()
