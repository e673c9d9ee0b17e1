"""Packaging pipeline orchestration.

The pipeline is a small state machine:

    init -> version_resolved -> built -> staged -> archived        -> done
                                               \\-> installer_built -/

Each transition runs one component. The first component error moves the
pipeline to ``failed`` and is returned to the caller as-is; nothing is retried.
Reruns are safe because every step is idempotent for identical inputs.

Whether the ``staged`` state leads to an archive or an installer is decided
once, when the pipeline is constructed, from the target's platform family.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path

from relpack.core.config import BuildConfig
from relpack.core.project import Project
from relpack.core.result import Err, Ok, Result
from relpack.output.console import ConsoleProtocol
from relpack.platform.target import PlatformFamily, Target

from .archive import archive_path, create_archive
from .build import build_release
from .errors import ArchiveError, InstallerError, PackageError
from .installer import build_installer, installer_path
from .staging import assemble_staging, staging_path
from .version import resolve_version

__all__ = [
    "ArchivePackaging",
    "InstallerPackaging",
    "Packaging",
    "PackagingPipeline",
    "PipelineState",
    "PipelineStep",
    "packaging_for",
    "run_state_machine",
]


class PipelineStep(StrEnum):
    INIT = "init"
    VERSION_RESOLVED = "version_resolved"
    BUILT = "built"
    STAGED = "staged"
    ARCHIVED = "archived"
    INSTALLER_BUILT = "installer_built"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineState:
    """Everything the pipeline knows so far; each step fills in one more field."""

    step: PipelineStep
    target: Target
    version: str | None = None
    binary: Path | None = None
    staging_dir: Path | None = None
    artifact: Path | None = None


@dataclass(frozen=True, slots=True)
class ArchivePackaging:
    """Unix-like targets: a .tar.gz next to the staging directory."""


@dataclass(frozen=True, slots=True)
class InstallerPackaging:
    """Windows targets: an MSI generated by cargo-wix."""

    output_dir: Path
    wxs_path: Path


Packaging = ArchivePackaging | InstallerPackaging

StepHandler = Callable[[PipelineState], Result[PipelineState, PackageError]]
Observer = Callable[[PipelineState], None]


def packaging_for(target: Target, project: Project) -> Packaging:
    match target.family:
        case PlatformFamily.WINDOWS:
            return InstallerPackaging(output_dir=project.wix_dir, wxs_path=project.wxs_path)
        case PlatformFamily.UNIX:
            return ArchivePackaging()


def run_state_machine(
    *,
    initial_state: PipelineState,
    handlers: Mapping[PipelineStep, StepHandler],
    on_transition: Observer,
) -> Result[PipelineState, PackageError]:
    """Drive ``initial_state`` to ``done``, stopping at the first error."""
    current = initial_state

    while current.step != PipelineStep.DONE:
        handler = handlers.get(current.step)
        if handler is None:
            raise AssertionError(f"no handler for pipeline step: {current.step}")

        outcome = handler(current)
        if isinstance(outcome, Err):
            on_transition(replace(current, step=PipelineStep.FAILED))
            return outcome

        current = outcome.value
        on_transition(current)

    return Ok(current)


class PackagingPipeline:
    """Builds, stages and packages one product binary for one target."""

    def __init__(
        self,
        *,
        project: Project,
        product: str,
        package: str,
        target: Target,
        console: ConsoleProtocol,
        build_settings: BuildConfig | None = None,
    ) -> None:
        self._project = project
        self._product = product
        self._package = package
        self._target = target
        self._console = console
        self._build_settings = build_settings or project.config.build
        self._packaging = packaging_for(target, project)
        self.transitions: list[PipelineStep] = []

    @property
    def packaging(self) -> Packaging:
        return self._packaging

    def handlers(self) -> dict[PipelineStep, StepHandler]:
        common: dict[PipelineStep, StepHandler] = {
            PipelineStep.INIT: self._resolve_version,
            PipelineStep.VERSION_RESOLVED: self._build,
            PipelineStep.BUILT: self._stage,
        }
        match self._packaging:
            case ArchivePackaging():
                return {
                    **common,
                    PipelineStep.STAGED: self._archive,
                    PipelineStep.ARCHIVED: self._finish,
                }
            case InstallerPackaging() as installer:
                return {
                    **common,
                    PipelineStep.STAGED: lambda s: self._build_installer(s, installer),
                    PipelineStep.INSTALLER_BUILT: self._finish,
                }

    def run(self) -> Result[PipelineState, PackageError]:
        self._console.header(f"Packaging {self._product} for {self._target}")
        return run_state_machine(
            initial_state=PipelineState(step=PipelineStep.INIT, target=self._target),
            handlers=self.handlers(),
            on_transition=self._report,
        )

    def _discard_stale_artifact(self, version: str | None) -> Result[None, PackageError]:
        """Remove an artifact left at this run's output path by an earlier run.

        The installer name carries no version, so it is cleared before version
        resolution; the archive name is known once the version is.
        """
        error_type: type[ArchiveError] | type[InstallerError]
        match self._packaging:
            case InstallerPackaging() as installer:
                stale = installer_path(
                    output_dir=installer.output_dir, product=self._product, target=self._target
                )
                error_type = InstallerError
            case ArchivePackaging() if version is not None:
                stale = archive_path(
                    staging_path(
                        dist_dir=self._project.dist_dir,
                        product=self._product,
                        version=version,
                        target=self._target,
                    )
                )
                error_type = ArchiveError
            case _:
                return Ok(None)

        try:
            stale.unlink(missing_ok=True)
        except OSError as e:
            return Err(error_type(message=f"cannot remove stale artifact {stale}: {e}"))
        return Ok(None)

    # -- steps -------------------------------------------------------------

    def _resolve_version(self, state: PipelineState) -> Result[PipelineState, PackageError]:
        cleared = self._discard_stale_artifact(None)
        if isinstance(cleared, Err):
            return cleared
        version = resolve_version(project_root=self._project.root, package=self._package)
        if isinstance(version, Err):
            return version
        cleared = self._discard_stale_artifact(version.value)
        if isinstance(cleared, Err):
            return cleared
        return Ok(replace(state, step=PipelineStep.VERSION_RESOLVED, version=version.value))

    def _build(self, state: PipelineState) -> Result[PipelineState, PackageError]:
        self._console.info(
            f"Building {self._product} release binary for target {self._target}..."
        )
        binary = build_release(
            project_root=self._project.root,
            target_dir=self._project.target_dir,
            product=self._product,
            target=self._target,
            settings=self._build_settings,
            console=self._console,
        )
        if isinstance(binary, Err):
            return binary
        return Ok(replace(state, step=PipelineStep.BUILT, binary=binary.value))

    def _stage(self, state: PipelineState) -> Result[PipelineState, PackageError]:
        assert state.version is not None and state.binary is not None
        staged = assemble_staging(
            dist_dir=self._project.dist_dir,
            product=self._product,
            version=state.version,
            target=self._target,
            binary=state.binary,
        )
        if isinstance(staged, Err):
            return staged
        return Ok(replace(state, step=PipelineStep.STAGED, staging_dir=staged.value))

    def _archive(self, state: PipelineState) -> Result[PipelineState, PackageError]:
        assert state.staging_dir is not None
        archive = create_archive(staging_dir=state.staging_dir)
        if isinstance(archive, Err):
            return archive
        return Ok(replace(state, step=PipelineStep.ARCHIVED, artifact=archive.value))

    def _build_installer(
        self, state: PipelineState, packaging: InstallerPackaging
    ) -> Result[PipelineState, PackageError]:
        msi = build_installer(
            project_root=self._project.root,
            wxs_path=packaging.wxs_path,
            output_dir=packaging.output_dir,
            product=self._product,
            package=self._package,
            target=self._target,
            console=self._console,
            timeout=float(self._build_settings.timeout),
        )
        if isinstance(msi, Err):
            return msi
        return Ok(replace(state, step=PipelineStep.INSTALLER_BUILT, artifact=msi.value))

    def _finish(self, state: PipelineState) -> Result[PipelineState, PackageError]:
        return Ok(replace(state, step=PipelineStep.DONE))

    def _report(self, state: PipelineState) -> None:
        self.transitions.append(state.step)
        match state.step:
            case PipelineStep.VERSION_RESOLVED:
                self._console.info(f"{self._package} version {state.version}")
            case PipelineStep.STAGED:
                self._console.info(f"Contents staged under {state.staging_dir}")
            case PipelineStep.ARCHIVED:
                self._console.success(f"Created archive {state.artifact}")
            case PipelineStep.INSTALLER_BUILT:
                self._console.success(f"Created installer {state.artifact}")
            case _:
                pass
