"""Inspect or clear the election wizard autosave slot."""

from __future__ import annotations

import argparse

from election_wizard.config import Settings, configure_logging, settings
from election_wizard.jobs.scheduler import AsyncIODebounceScheduler
from election_wizard.schemas.autosave import LoadedAutosave
from election_wizard.services.autosave_service import AutosaveService
from election_wizard.services.completion_service import CompletionScorer
from election_wizard.services.scratch_storage import build_scratch_storage


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show or clear the draft snapshot kept by the election wizard.",
    )
    parser.add_argument(
        "action",
        choices=["show", "clear"],
        help="What to do with the autosave slot.",
    )
    parser.add_argument(
        "--backend",
        type=str,
        default=settings.storage_backend,
        choices=["memory", "file", "supabase"],
        help="Scratch storage backend (default: from settings).",
    )
    parser.add_argument(
        "--storage-dir",
        type=str,
        default=settings.storage_dir,
        help="Directory used by the file backend.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Log level for this run.",
    )
    return parser.parse_args()


def build_service(config: Settings) -> AutosaveService:
    """Return an autosave service bound to the configured slot."""
    return AutosaveService(
        build_scratch_storage(config),
        AsyncIODebounceScheduler(),
        config=config,
    )


def print_snapshot(snapshot: LoadedAutosave | None) -> None:
    """Print a one-screen description of the stored snapshot."""
    if snapshot is None:
        print("No usable autosave found.")
        return
    draft = snapshot.data
    print(f"Title:      {draft.title}")
    print(f"Saved at:   {snapshot.timestamp.isoformat()}")
    print(f"Recent:     {'yes' if snapshot.is_recent else 'no'}")
    print(f"Questions:  {len(draft.questions)}")
    print(f"Completion: {CompletionScorer().score(draft)}%")


def main() -> None:
    """CLI entry point."""
    args = parse_args()
    configure_logging(args.log_level)
    config = settings.model_copy(
        update={"storage_backend": args.backend, "storage_dir": args.storage_dir}
    )
    service = build_service(config)
    if args.action == "clear":
        service.clear()
        print(f"Cleared autosave slot {config.autosave_slot_key}.")
        return
    print_snapshot(service.load())


if __name__ == "__main__":
    main()
