"""copilot-assets CLI — install, update and audit AI assistant assets in a project."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from git import GitCommandError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from copilot_assets import __version__
from copilot_assets.config import RemoteConfig, config_path
from copilot_assets.errors import CopilotAssetsError
from copilot_assets.models.assets import AssetTypeFilter, TargetTool, parse_targets
from copilot_assets.models.manifest import HOME_DIR, TemplateSource
from copilot_assets.models.results import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    DiagnosticsResult,
    DryRunResult,
    OperationType,
    PlannedOperation,
    SyncResult,
    VerifyStatus,
)
from copilot_assets.output import OutputMode, Presenter
from copilot_assets.sync.compliance import ComplianceValidator
from copilot_assets.sync.engine import SyncEngine
from copilot_assets.sync.manifest_store import ManifestStore
from copilot_assets.sync.verify import Verifier
from copilot_assets.templates.base import TemplateProvider
from copilot_assets.templates.factory import TemplateProviderFactory
from copilot_assets.utils import git_ops

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log each sync decision")
def main(verbose: bool):
    """copilot-assets — keep AI assistant instructions, prompts, agents and
    skills in sync across repositories.

    Assets are installed from bundled or remote templates, recorded in
    .github/.copilot-assets.json and audited against their checksums.
    """
    configure_logging(verbose)


# ── Shared options ───────────────────────────────────────────────────


def dir_option(f):
    return click.option(
        "--dir", "target_dir", default=".", show_default=True,
        type=click.Path(file_okay=False, exists=True),
        help="Target project directory",
    )(f)


def json_option(f):
    return click.option("--json", "json_output", is_flag=True, help="Print one JSON result")(f)


def filter_options(f):
    f = click.option("--exclude", default=None, help="Asset types to skip, e.g. 'skills'")(f)
    return click.option(
        "--only", default=None, help="Asset types to include, e.g. 'prompts,agents'"
    )(f)


def target_option(f):
    return click.option(
        "--target", default=None,
        help="Target tools, e.g. 'copilot,claude,cursor' (default: .github layout only)",
    )(f)


def source_options(f):
    f = click.option(
        "--use-default-templates", is_flag=True, help="Ignore any configured remote source"
    )(f)
    return click.option(
        "--source", default=None, help="Template source: 'default' or 'owner/repo[@branch]'"
    )(f)


def build_filter(only: str | None, exclude: str | None) -> AssetTypeFilter | None:
    if only and exclude:
        raise click.UsageError("--only and --exclude cannot be used together")
    if only:
        return AssetTypeFilter.only(only)
    if exclude:
        return AssetTypeFilter.exclude(exclude)
    return None


def build_targets(target: str | None) -> list[TargetTool] | None:
    return parse_targets(target) if target else None


def build_provider(source: str | None, use_default: bool) -> TemplateProvider:
    return TemplateProviderFactory().resolve(source, use_default=use_default)


def run_command(command: str, json_output: bool, body) -> None:
    """Run *body(presenter)* and exit with the code it returns.

    Library errors are reported through the presenter with exit code 1.
    """
    presenter = Presenter(OutputMode.from_flag(json_output))
    try:
        code = body(presenter)
    except CopilotAssetsError as e:
        logger.debug("%s failed", command, exc_info=True)
        code = presenter.finish(command, None, EXIT_ERROR, errors=[str(e)])
    click.get_current_context().exit(code)


# ── Sync reporting ───────────────────────────────────────────────────


def report_sync(
    presenter: Presenter,
    command: str,
    result: SyncResult,
    target_dir: str,
    no_git: bool,
) -> int:
    for asset in result.synced:
        marker = "[yellow]~[/]" if asset.was_updated else "[green]+[/]"
        presenter.print(f"  {marker} {asset.relative_path}")
    for path in result.unchanged:
        presenter.print(f"  [dim]=[/] {path}")

    data = result.to_dict()
    warnings = list(result.warnings)
    if result.success:
        presenter.print(
            f"\n  Created {result.created_count}, updated {result.updated_count}, "
            f"unchanged {len(result.unchanged)}, skipped {len(result.skipped)} "
            f"(source: {result.source})"
        )
        if not no_git:
            staged, git_warning = stage_synced(target_dir, result)
            data["staged"] = staged
            if git_warning:
                warnings.append(git_warning)
            elif staged:
                presenter.success(f"Staged {len(staged)} file(s)")

    code = EXIT_SUCCESS if result.success else EXIT_ERROR
    return presenter.finish(command, data, code, errors=result.errors, warnings=warnings)


def stage_synced(target_dir: str, result: SyncResult) -> tuple[list[str], str | None]:
    """Keep assets visible to git and stage what the sync wrote."""
    root = git_ops.repository_root(target_dir)
    if root is None:
        return [], None

    files = [asset.full_path for asset in result.synced]
    try:
        if git_ops.ensure_gitignore_patterns(root):
            files.append(str(root / ".gitignore"))
        return git_ops.stage_files(root, files), None
    except (OSError, ValueError, GitCommandError) as e:
        return [], f"Could not stage files: {e}"


def report_dry_run(
    presenter: Presenter,
    command: str,
    result: DryRunResult,
    target_dir: str,
    no_git: bool,
) -> int:
    if not result.errors and not no_git:
        root = git_ops.repository_root(target_dir)
        if root is not None and git_ops.missing_gitignore_patterns(root):
            result.operations.append(
                PlannedOperation(OperationType.MODIFY, ".gitignore", "append entry")
            )

    markers = {
        OperationType.CREATE: "[green]create[/]",
        OperationType.UPDATE: "[yellow]update[/]",
        OperationType.DELETE: "[red]delete[/]",
        OperationType.SKIP: "[dim]skip[/]",
        OperationType.MODIFY: "[yellow]modify[/]",
    }
    presenter.print("  [bold]Dry run[/] — no files will be written\n")
    for op in result.operations:
        reason = f" ({op.reason})" if op.reason else ""
        presenter.print(f"  {markers[op.type]} {op.path}{reason}")

    summary = result.summary()
    presenter.print(
        f"\n  {summary['creates']} to create, {summary['updates']} to update, "
        f"{summary['modifies']} to modify, {summary['skips']} skipped"
    )
    return presenter.finish(
        command, result.to_dict(), result.exit_code,
        errors=result.errors, warnings=result.warnings,
    )


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@dir_option
@json_option
@filter_options
@target_option
@source_options
@click.option("--force", is_flag=True, help="Overwrite files that differ from the templates")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("--no-git", is_flag=True, help="Do not touch .gitignore or stage files")
def init(target_dir, json_output, only, exclude, target, source, use_default_templates,
         force, dry_run, no_git):
    """Install assets into a project."""

    def body(p: Presenter) -> int:
        asset_filter = build_filter(only, exclude)
        targets = build_targets(target)
        engine = SyncEngine(build_provider(source, use_default_templates))
        p.heading(f"Installing assets into {Path(target_dir).resolve()}")

        if dry_run:
            preview = engine.preview_sync(target_dir, force, asset_filter, targets)
            return report_dry_run(p, "init", preview, target_dir, no_git)

        if ManifestStore(target_dir).exists() and not force:
            return p.finish(
                "init", {"alreadyInstalled": True}, EXIT_SUCCESS,
                warnings=["Assets already installed. Run 'copilot-assets update' "
                          "or use --force to reinstall."],
            )

        result = engine.sync(target_dir, force=force, asset_filter=asset_filter, targets=targets)
        return report_sync(p, "init", result, target_dir, no_git)

    run_command("init", json_output, body)


# ── Update ───────────────────────────────────────────────────────────


@main.command()
@dir_option
@json_option
@filter_options
@target_option
@source_options
@click.option("--force", is_flag=True, help="Rewrite every asset, even when up to date")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("--no-git", is_flag=True, help="Do not touch .gitignore or stage files")
def update(target_dir, json_output, only, exclude, target, source, use_default_templates,
           force, dry_run, no_git):
    """Update installed assets to the latest templates."""

    def body(p: Presenter) -> int:
        asset_filter = build_filter(only, exclude)
        engine = SyncEngine(build_provider(source, use_default_templates))
        manifest = engine.read_manifest(target_dir)
        if manifest is None:
            return p.finish(
                "update", None, EXIT_ERROR,
                errors=["No manifest found. Run 'copilot-assets init' first."],
            )

        targets = build_targets(target) or engine.manifest_targets(manifest)
        p.heading(f"Updating assets in {Path(target_dir).resolve()}")

        if dry_run:
            preview = engine.preview_sync(target_dir, True, asset_filter, targets)
            return report_dry_run(p, "update", preview, target_dir, no_git)

        if not force and not target:
            check = engine.check_for_updates(target_dir, asset_filter)
            if check.error:
                return p.finish("update", check.to_dict(), EXIT_ERROR, errors=[check.error])
            if not check.has_changes:
                p.success("Assets are up to date")
                return p.finish("update", check.to_dict(), EXIT_SUCCESS)
            p.info(
                f"{len(check.added)} added, {len(check.modified)} modified, "
                f"{len(check.removed)} removed upstream"
            )

        result = engine.sync(target_dir, force=True, asset_filter=asset_filter, targets=targets)
        return report_sync(p, "update", result, target_dir, no_git)

    run_command("update", json_output, body)


# ── Verify ───────────────────────────────────────────────────────────


@main.command()
@dir_option
@json_option
@filter_options
@source_options
@click.option("--restore", is_flag=True, help="Rewrite modified or missing assets")
def verify(target_dir, json_output, only, exclude, source, use_default_templates, restore):
    """Check installed assets against their recorded checksums."""

    def body(p: Presenter) -> int:
        asset_filter = build_filter(only, exclude)
        verifier = Verifier(build_provider(source, use_default_templates))
        result = verifier.verify(target_dir, restore=restore, asset_filter=asset_filter)
        p.heading(f"Verifying {Path(target_dir).resolve()}")

        if result.assets:
            styles = {
                VerifyStatus.VALID: "[green]valid[/]",
                VerifyStatus.MODIFIED: "[yellow]modified[/]",
                VerifyStatus.MISSING: "[red]missing[/]",
                VerifyStatus.RESTORED: "[cyan]restored[/]",
            }
            table = Table(title=f"Assets ({len(result.assets)})")
            table.add_column("Type", style="dim")
            table.add_column("Path", style="cyan")
            table.add_column("Status")
            for a in result.assets:
                table.add_row(a.type, a.tracking_path, styles[a.status])
            p.table(table)

        return p.finish(
            "verify", result.to_dict(), result.exit_code,
            errors=result.errors, warnings=result.warnings,
        )

    run_command("verify", json_output, body)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@dir_option
@json_option
@click.option("--ci", is_flag=True, help="Strict mode: local modifications are errors")
def validate(target_dir, json_output, ci):
    """Validate the project against the asset policy."""

    def body(p: Presenter) -> int:
        result = ComplianceValidator().validate(target_dir, strict=ci)
        p.heading(f"Validating {Path(target_dir).resolve()}")
        for line in result.info:
            p.success(line)
        if not result.is_compliant:
            p.print("\n[red]Not compliant[/]")
        return p.finish(
            "validate", result.to_dict(), result.exit_code,
            errors=result.errors, warnings=result.warnings,
        )

    run_command("validate", json_output, body)


# ── List ─────────────────────────────────────────────────────────────


@main.command(name="list")
@dir_option
@json_option
@filter_options
def list_assets(target_dir, json_output, only, exclude):
    """List installed assets."""

    def body(p: Presenter) -> int:
        asset_filter = build_filter(only, exclude)
        engine = SyncEngine(TemplateProviderFactory().default_provider())
        result = engine.list_assets(target_dir, asset_filter)
        if result is None:
            return p.finish(
                "list", None, EXIT_ERROR,
                errors=["No manifest found. Run 'copilot-assets init' first."],
            )

        if not result.assets:
            p.print("[yellow]No assets installed.[/]")
        else:
            table = Table(title=f"Installed assets ({len(result.assets)}) — {result.source}")
            table.add_column("Type", style="dim")
            table.add_column("Name", style="cyan")
            table.add_column("Path")
            table.add_column("Status")
            for a in result.assets:
                status = "[green]valid[/]" if a.valid else f"[yellow]{a.reason}[/]"
                table.add_row(a.type, a.name, a.path, status)
            p.table(table)

        return p.finish("list", result.to_dict(), EXIT_SUCCESS)

    run_command("list", json_output, body)


# ── Doctor ───────────────────────────────────────────────────────────


@main.command()
@dir_option
@json_option
def doctor(target_dir, json_output):
    """Diagnose the environment and the project."""

    def body(p: Presenter) -> int:
        factory = TemplateProviderFactory()
        config = RemoteConfig.load()
        if config.has_remote_source:
            source = TemplateSource.remote(config.source, config.branch)
        else:
            source = TemplateSource.default()
        result = DiagnosticsResult(
            tool_version=__version__,
            git_available=git_ops.is_git_available(),
            is_git_repository=git_ops.is_repository(target_dir),
            home_directory_exists=(Path(target_dir) / HOME_DIR).is_dir(),
            manifest_exists=ManifestStore(target_dir).exists(),
            templates_available=factory.default_provider().is_available(),
            source=source,
        )

        if not result.templates_available:
            result.issues.append("Bundled templates are missing from the installation")
        if config.has_remote_source and not RemoteConfig.is_valid_source(config.source):
            result.issues.append(f"Configured source is not 'owner/repo': {config.source}")
        if result.manifest_exists:
            try:
                ManifestStore(target_dir).read()
            except CopilotAssetsError as e:
                result.issues.append(f"Manifest is unreadable: {e}")

        p.heading("Diagnostics")
        checks = [
            ("copilot-assets", __version__, True),
            ("git", "available" if result.git_available else "not found", result.git_available),
            ("repository", "yes" if result.is_git_repository else "no", result.is_git_repository),
            (HOME_DIR, "present" if result.home_directory_exists else "absent",
             result.home_directory_exists),
            ("manifest", "present" if result.manifest_exists else "absent", result.manifest_exists),
            ("templates", "bundled" if result.templates_available else "missing",
             result.templates_available),
            ("source", str(result.source or "default templates"), True),
        ]
        for name, value, ok in checks:
            mark = "[green]v[/]" if ok else "[yellow]-[/]"
            p.print(f"  {mark} {name}: {value}")

        code = EXIT_ERROR if result.has_issues else EXIT_SUCCESS
        return p.finish("doctor", result.to_dict(), code, errors=result.issues)

    run_command("doctor", json_output, body)


# ── Config ───────────────────────────────────────────────────────────


@main.group()
def config():
    """Manage the remote template source."""


@config.command(name="show")
@json_option
def config_show(json_output):
    """Show the current configuration."""

    def body(p: Presenter) -> int:
        cfg = RemoteConfig.load()
        data = {"source": cfg.source, "branch": cfg.branch, "path": str(config_path())}
        if cfg.has_remote_source:
            p.info(f"Source: [cyan]{cfg.source}[/] (branch {cfg.branch})")
        else:
            p.info("Source: default templates")
        p.info(f"Config file: {config_path()}")
        return p.finish("config show", data, EXIT_SUCCESS)

    run_command("config show", json_output, body)


@config.command(name="set")
@click.option("--source", required=True, help="Remote template repository, 'owner/repo'")
@click.option("--branch", default="main", show_default=True, help="Branch to fetch from")
@json_option
def config_set(source, branch, json_output):
    """Use a remote repository as the template source."""

    def body(p: Presenter) -> int:
        if not RemoteConfig.is_valid_source(source):
            return p.finish(
                "config set", None, EXIT_ERROR,
                errors=[f"Invalid source '{source}'. Expected 'owner/repo'."],
            )
        if not RemoteConfig.is_valid_branch(branch):
            return p.finish("config set", None, EXIT_ERROR, errors=[f"Invalid branch '{branch}'."])

        path = RemoteConfig(source=source, branch=branch).save()
        p.success(f"Template source set to {source}@{branch}")
        return p.finish(
            "config set", {"source": source, "branch": branch, "path": str(path)}, EXIT_SUCCESS
        )

    run_command("config set", json_output, body)


@config.command(name="reset")
@json_option
def config_reset(json_output):
    """Go back to the bundled templates."""

    def body(p: Presenter) -> int:
        removed = RemoteConfig.reset()
        p.success("Configuration reset to default templates")
        return p.finish("config reset", {"removed": removed}, EXIT_SUCCESS)

    run_command("config reset", json_output, body)


if __name__ == "__main__":
    main()
