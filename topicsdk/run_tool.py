"""Command-line entry point: build the requested models and write the run logs."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.docset import DocSet, DocSetType, Platform, build_win32_model
from topicsdk.errors import TopicSdkError
from topicsdk.load_config import load_config
from topicsdk.load_module_database import load_module_database
from topicsdk.model_report import ModelReport, config_fingerprint
from topicsdk.module_groups import group_by_module
from topicsdk.run_context import RunContext, build_context

if TYPE_CHECKING:
    from topicsdk.api_ref_model import ApiRefModel

logger = logging.getLogger(__name__)

PLATFORMS = {
    "uwp": (Platform.UWP_WINDOWS_10, "UWP"),
    "winrt": (Platform.WINRT_WINDOWS_8X_AND_10, "WinRT"),
}
CONTENT_TYPES = {
    "both": (DocSetType.CONCEPTUAL_AND_REFERENCE, "conceptual and reference"),
    "conceptual": (DocSetType.CONCEPTUAL_ONLY, "conceptual"),
    "reference": (DocSetType.REFERENCE_ONLY, "reference"),
}


def _print_model_summary(model: ApiRefModel) -> None:
    for namespace in model.sorted_namespaces():
        member_count = sum(len(c.members) for c in namespace.classes)
        print(
            f"{namespace.name} ({namespace.project_name}): "
            f"{len(namespace.classes)} classes, {member_count} members"
        )


def _run_win32(
    context: RunContext, args: argparse.Namespace, report: ModelReport
) -> None:
    win32_model = build_win32_model(context)
    print(f"{len(win32_model.functions)} Win32 functions documented.")
    report.add_win32(win32_model)

    if args.module_db is None:
        return
    sdk_version, records = load_module_database(args.module_db)
    umbrella = group_by_module(win32_model, records, sdk_version, args.module_db.stem)
    groups = umbrella.sort_alphabetically()
    print(
        f"{sum(len(m.apis) for m in umbrella.modules)} functions in "
        f"{len(umbrella.modules)} modules, {len(groups)} initial-character groups."
    )
    report.add_modules(umbrella)


def run(args: argparse.Namespace) -> int:
    """Execute a run. Returns the process exit code."""
    try:
        config = load_config(args.config)
        if args.dry_run:
            config["dry_run"] = True
        config_dir = Path(args.config).resolve().parent if args.config else None
        context = build_context(config, config_dir)

        report = ModelReport(config_fingerprint(config))

        platform, platform_label = PLATFORMS[args.docset]
        docset_type, content_label = CONTENT_TYPES[args.content]
        docset = DocSet.create(
            context, docset_type, platform, f"{platform_label} {content_label} docs"
        )

        model = None
        if docset_type is not DocSetType.CONCEPTUAL_ONLY:
            model = docset.api_ref_model
            _print_model_summary(model)
        report.add_docset(docset, model)

        if args.win32:
            _run_win32(context, args, report)
        elif args.module_db is not None:
            logger.warning("--module-db has no effect without --win32")

        if args.report:
            report.generate_report(args.report)
            print(f"Wrote report to {args.report}")

        context.logs.output_files_saved_log(context.dry_run)
        context.logs.output_other_logs()
    except TopicSdkError as e:
        logger.error("%s", e)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description=(
            "Build object models of the WinRT/UWP and Win32 reference topics "
            "in a documentation enlistment."
        )
    )
    ap.add_argument("--config", help="Path to a YAML or configuration.txt file")
    ap.add_argument(
        "--docset",
        choices=sorted(PLATFORMS),
        default="uwp",
        help="Platform whose projects make up the docset",
    )
    ap.add_argument(
        "--content",
        choices=list(CONTENT_TYPES),
        default="reference",
        help="Which projects of the platform to include",
    )
    ap.add_argument(
        "--win32",
        action="store_true",
        help="Also build the Win32 function model from desktop.txt projects",
    )
    ap.add_argument(
        "--module-db",
        type=Path,
        help="YAML module database export to group Win32 functions by module",
    )
    ap.add_argument("--report", type=Path, help="Write a JSON summary here")
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't check out or save any file",
    )
    return ap


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run."""
    return run(build_parser().parse_args(argv))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    raise SystemExit(main())
