from __future__ import annotations

"""
render – Run a template's steps in a scratch dir, then commit to the destination.

Provides:
  • RenderParams / RenderResult
  • render(params)                        – the whole pipeline
  • commit_tentatively(params, ...)       – dry-run commit, then the real one

The destination is only touched once every step has succeeded and a dry run
of the commit found no conflict. The scratch dir is always removed at the
end unless ``keep_temp_dirs`` is set.
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TextIO, Tuple

from stencil.constants import (
    BACKUP_DIR_PREFIX,
    DEFAULT_IGNORE_PATTERNS,
    OWNER_RWX,
    SCRATCH_DIR_PREFIX,
)
from stencil.core.cancel import CancelToken
from stencil.core.interfaces.fs import FileSystemProtocol
from stencil.core.interfaces.logging import LoggerFactoryProtocol
from stencil.core.interfaces.predicate import PredicateEvaluatorProtocol
from stencil.core.interfaces.templating import TemplateEngineProtocol
from stencil.core.models import CopyHint, Features, StrLike
from stencil.core.report import RenderReport, StageTimer
from stencil.core.steps import Step
from stencil.errors import StencilError
from stencil.io.copier import CopyEntry, CopyParams, copy_recursive
from stencil.io.fs import RealFS, fs_error
from stencil.io.tempdirs import DirTracker, keep_temp_dirs_from_env
from stencil.logging.helpers import get_logger
from stencil.rendering.context import StepParams
from stencil.rendering.execution import execute_steps
from stencil.rendering.funcs import template_funcs
from stencil.rendering.predicates import LiteralPredicateEvaluator
from stencil.rendering.scope import Scope
from stencil.rendering.template_engine import GoTemplateEngine
from stencil.utils.paths import is_reserved_in_dest

DEFAULT_BACKUP_DIR = os.path.join(os.path.expanduser('~'), '.stencil', 'backups')


@dataclass
class RenderParams:
    """Inputs of :func:`render`.

    ``keep_temp_dirs`` defaults to ``STENCIL_KEEP_TEMP_DIRS=1``. An empty
    ``ignore_patterns`` falls back to :data:`DEFAULT_IGNORE_PATTERNS`.
    """
    template_dir: str
    dest_dir: str
    steps: Sequence[Step]
    inputs: Mapping[str, str] = field(default_factory=dict)
    fs: FileSystemProtocol = field(default_factory=RealFS)
    ignore_patterns: Sequence[StrLike] = ()
    features: Features = Features()
    force_overwrite: bool = False
    backups: bool = False
    backup_dir: Optional[str] = None
    keep_temp_dirs: bool = field(default_factory=keep_temp_dirs_from_env)
    temp_dir_base: Optional[str] = None
    stdout: Optional[TextIO] = None
    evaluator: PredicateEvaluatorProtocol = field(default_factory=LiteralPredicateEvaluator)
    engine: TemplateEngineProtocol = field(default_factory=GoTemplateEngine)
    cancel: Optional[CancelToken] = None
    debug_scratch_contents: bool = False
    hasher: Callable[[], Any] = hashlib.sha256
    extra_print_vars: Mapping[str, str] = field(default_factory=dict)
    logger: Optional[logging.Logger] = None
    logger_factory: Optional[LoggerFactoryProtocol] = None


@dataclass
class RenderResult:
    output_hashes: Dict[str, bytes]
    included_from_dest: Dict[str, str]
    backup_dir: Optional[str]
    report: RenderReport


def _render_logger(factory: Optional[LoggerFactoryProtocol]) -> logging.Logger:
    if factory is None:
        return get_logger('render')
    return factory.get_logger('render')


def render(params: RenderParams) -> RenderResult:
    """Render the template into ``params.dest_dir``.

    Raises:
        ActionError: a step failed; nothing was written to the destination.
        OverwriteConflictError: the commit would clobber a file it may not.
        RenderCancelledError: the cancel token fired.
        OSError: filesystem failures.
    """
    log = params.logger or _render_logger(params.logger_factory)
    report = RenderReport()
    tracker = DirTracker(params.fs, keep_temp_dirs=params.keep_temp_dirs, logger=log)

    failed = True
    try:
        result = _render(params, tracker, report, log)
        failed = False
    finally:
        cleanup = tracker.remove_all()
        for exc in cleanup:
            report.add_error(str(exc))
            log.warning('⚠  failed removing temporary directory: %s', exc)
        if cleanup and not failed:
            raise StencilError(
                'failed removing temporary directories: ' + '; '.join(str(e) for e in cleanup)
            ) from cleanup[0]

    report.finish()
    return result


def _render(
    params: RenderParams,
    tracker: DirTracker,
    report: RenderReport,
    log: logging.Logger,
) -> RenderResult:
    try:
        scratch_dir = tracker.mkdir_temp_tracked(params.temp_dir_base, SCRATCH_DIR_PREFIX)
    except OSError as exc:
        raise fs_error('mkdir_temp', params.temp_dir_base or '<default temp dir>', exc) from exc
    log.debug('created scratch directory %s', scratch_dir)

    sp = StepParams(
        scope=Scope(params.inputs, template_funcs(params.features)),
        scratch_dir=scratch_dir,
        template_dir=params.template_dir,
        dest_dir=params.dest_dir,
        fs=params.fs,
        features=params.features,
        ignore_patterns=params.ignore_patterns or DEFAULT_IGNORE_PATTERNS,
        extra_print_vars=params.extra_print_vars,
        stdout=params.stdout,
        engine=params.engine,
        evaluator=params.evaluator,
        cancel=params.cancel,
        debug_scratch_contents=params.debug_scratch_contents,
        report=report,
        logger=log,
    )
    with StageTimer(report, 'steps'):
        execute_steps(params.steps, sp)

    hashes, backup_dir = commit_tentatively(params, scratch_dir, sp.included_from_dest, report, log)
    return RenderResult(
        output_hashes=hashes,
        included_from_dest=dict(sp.included_from_dest),
        backup_dir=backup_dir,
        report=report,
    )


def commit_tentatively(
    params: RenderParams,
    scratch_dir: str,
    included_from_dest: Mapping[str, str],
    report: RenderReport,
    log: logging.Logger,
) -> Tuple[Dict[str, bytes], Optional[str]]:
    """Commit in dry run, then for real; return the real run's hashes and backup dir."""
    backup_dir: Optional[str] = None

    def backup_dir_maker(fs: FileSystemProtocol) -> str:
        nonlocal backup_dir
        if backup_dir is not None:
            return backup_dir
        base = params.backup_dir or DEFAULT_BACKUP_DIR
        try:
            fs.mkdir_all(base, OWNER_RWX)
            backup_dir = fs.mkdir_temp(base, BACKUP_DIR_PREFIX)
        except OSError as exc:
            raise fs_error('mkdir_temp', base, exc, prefix='failed creating backup directory: ') from exc
        log.debug('created backup directory %s', backup_dir)
        return backup_dir

    hashes: Dict[str, bytes] = {}
    for dry_run in (True, False):
        stage = 'commit_dry_run' if dry_run else 'commit'
        with StageTimer(report, stage):
            hashes = commit(params, scratch_dir, included_from_dest, report, log,
                            dry_run=dry_run, backup_dir_maker=backup_dir_maker)
    return hashes, backup_dir


def commit(
    params: RenderParams,
    scratch_dir: str,
    included_from_dest: Mapping[str, str],
    report: RenderReport,
    log: logging.Logger,
    *,
    dry_run: bool,
    backup_dir_maker: Callable[[FileSystemProtocol], str],
) -> Dict[str, bytes]:
    def visitor(rel: str, entry: CopyEntry) -> CopyHint:
        if rel != os.curdir and is_reserved_in_dest(rel):
            raise StencilError(f'the destination path "{rel}" is reserved and may not be written by a template')
        if not entry.is_dir and not dry_run:
            report.files_committed += 1
        return CopyHint(
            backup_if_exists=params.backups,
            allow_preexisting=params.force_overwrite or rel in included_from_dest,
        )

    copy_params = CopyParams(
        src_root=scratch_dir,
        dst_root=params.dest_dir,
        fs=params.fs,
        visitor=visitor,
        dry_run=dry_run,
        backup_dir_maker=backup_dir_maker,
        hasher=params.hasher,
        out_hashes={},
        cancel=params.cancel,
        logger=log,
    )
    try:
        copy_recursive(copy_params)
    except StencilError as exc:
        exc.prefixed('failed writing to the destination directory: ')
        raise

    if dry_run:
        log.debug('template render (dry run) succeeded')
    else:
        log.info('template render succeeded')
    return copy_params.out_hashes or {}
