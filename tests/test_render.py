from __future__ import annotations

import errno
import hashlib
import io
import logging
import os
import tempfile
import unittest

from dirmap import load_dir, write_dir

from stencil import render_dir
from stencil.core.cancel import CancelToken
from stencil.core.steps import Append, GoTemplate, Include, IncludePath, Print, steps
from stencil.errors import ActionError, OverwriteConflictError, RenderCancelledError, StencilError
from stencil.io.fs import ErrorFS
from stencil.rendering.render import RenderParams, render


class RenderTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        root = self._td.name
        self.template = os.path.join(root, 'template')
        self.dest = os.path.join(root, 'dest')
        self.temp_base = os.path.join(root, 'tmp')
        self.backups = os.path.join(root, 'backups')
        for d in (self.template, self.dest, self.temp_base):
            os.makedirs(d)

    def tearDown(self) -> None:
        self._td.cleanup()

    def params(self, step_list, **kwargs) -> RenderParams:
        kwargs.setdefault('keep_temp_dirs', False)
        kwargs.setdefault('stdout', io.StringIO())
        return RenderParams(
            template_dir=self.template,
            dest_dir=self.dest,
            steps=step_list,
            temp_dir_base=self.temp_base,
            backup_dir=self.backups,
            **kwargs,
        )


class RenderTests(RenderTestCase):
    def test_renders_into_destination(self) -> None:
        write_dir(self.template, {
            'spec.yaml': 'steps: []',
            'greeting.txt': 'Hello {{.name}}\n',
            'sub/static.txt': 'static',
        })
        result = render(self.params(
            steps(
                Include(paths=[IncludePath(paths=['.'])]),
                GoTemplate(paths=['greeting.txt']),
            ),
            inputs={'name': 'world'},
        ))
        self.assertEqual(load_dir(self.dest), {'greeting.txt': 'Hello world\n', 'sub/static.txt': 'static'})
        self.assertEqual(
            result.output_hashes,
            {
                'greeting.txt': hashlib.sha256(b'Hello world\n').digest(),
                'sub/static.txt': hashlib.sha256(b'static').digest(),
            },
        )
        self.assertIsNone(result.backup_dir)
        self.assertEqual(result.report.files_committed, 2)
        self.assertEqual(result.report.steps_run, 2)
        self.assertIsNotNone(result.report.duration_s)

    def test_scratch_dir_is_removed(self) -> None:
        write_dir(self.template, {'a.txt': 'a'})
        render(self.params(steps(Include(paths=[IncludePath(paths=['a.txt'])]))))
        self.assertEqual(os.listdir(self.temp_base), [])

    def test_scratch_dir_can_be_kept(self) -> None:
        write_dir(self.template, {'a.txt': 'a'})
        render(self.params(steps(Include(paths=[IncludePath(paths=['a.txt'])])), keep_temp_dirs=True))
        kept = os.listdir(self.temp_base)
        self.assertEqual(len(kept), 1)
        self.assertTrue(kept[0].startswith('scratch-'))
        self.assertEqual(load_dir(os.path.join(self.temp_base, kept[0])), {'a.txt': 'a'})

    def test_print_reaches_stdout(self) -> None:
        out = io.StringIO()
        render(self.params(steps(Print(message='rendering {{.name}}')), inputs={'name': 'x'}, stdout=out))
        self.assertEqual(out.getvalue(), 'rendering x\n')
        self.assertEqual(load_dir(self.dest), {})

    def test_failed_step_leaves_destination_untouched(self) -> None:
        write_dir(self.template, {'a.txt': 'a'})
        write_dir(self.dest, {'existing.txt': 'e'})
        with self.assertRaises(ActionError) as cm:
            render(self.params(steps(
                Include(paths=[IncludePath(paths=['a.txt'])]),
                Append(paths=['missing.txt'], with_='x'),
            )))
        self.assertEqual(cm.exception.index, 1)
        self.assertEqual(load_dir(self.dest), {'existing.txt': 'e'})
        self.assertEqual(os.listdir(self.temp_base), [])

    def test_cancelled_render(self) -> None:
        write_dir(self.template, {'a.txt': 'a'})
        token = CancelToken()
        token.cancel()
        with self.assertRaises(RenderCancelledError):
            render(self.params(steps(Include(paths=[IncludePath(paths=['a.txt'])])), cancel=token))
        self.assertEqual(load_dir(self.dest), {})
        self.assertEqual(os.listdir(self.temp_base), [])

    def test_render_dir_helper(self) -> None:
        write_dir(self.template, {'a.txt': '{{.x}}'})
        result = render_dir(
            self.template,
            self.dest,
            steps(Include(paths=[IncludePath(paths=['a.txt'])]), GoTemplate(paths=['a.txt'])),
            inputs={'x': 'rendered'},
        )
        self.assertEqual(load_dir(self.dest), {'a.txt': 'rendered'})
        self.assertIn('a.txt', result.output_hashes)


class CommitTests(RenderTestCase):
    def test_overwrite_needs_force(self) -> None:
        write_dir(self.template, {'file1.txt': 'new', 'file2.txt': 'two'})
        write_dir(self.dest, {'file1.txt': 'old'})
        with self.assertRaises(OverwriteConflictError) as cm:
            render(self.params(steps(Include(paths=[IncludePath(paths=['.'])]))))
        self.assertTrue(str(cm.exception).startswith('failed writing to the destination directory: '))
        self.assertIn('already exists and overwriting was not enabled', str(cm.exception))
        # the dry run found the conflict, so nothing was written
        self.assertEqual(load_dir(self.dest), {'file1.txt': 'old'})

    def test_force_overwrite_with_backups(self) -> None:
        write_dir(self.template, {'file1.txt': 'new'})
        write_dir(self.dest, {'file1.txt': 'old'})
        result = render(self.params(
            steps(Include(paths=[IncludePath(paths=['.'])])),
            force_overwrite=True,
            backups=True,
        ))
        self.assertEqual(load_dir(self.dest), {'file1.txt': 'new'})
        self.assertIsNotNone(result.backup_dir)
        self.assertEqual(os.path.dirname(result.backup_dir), self.backups)
        self.assertTrue(os.path.basename(result.backup_dir).startswith('backup-'))
        self.assertEqual(load_dir(result.backup_dir), {'file1.txt': 'old'})

    def test_force_overwrite_without_backups(self) -> None:
        write_dir(self.template, {'file1.txt': 'new'})
        write_dir(self.dest, {'file1.txt': 'old'})
        result = render(self.params(steps(Include(paths=[IncludePath(paths=['.'])])), force_overwrite=True))
        self.assertEqual(load_dir(self.dest), {'file1.txt': 'new'})
        self.assertIsNone(result.backup_dir)
        self.assertFalse(os.path.exists(self.backups))

    def test_files_included_from_destination_may_be_replaced(self) -> None:
        write_dir(self.dest, {'notes.txt': 'old', 'other.txt': 'untouched'})
        result = render(self.params(steps(
            Include(paths=[IncludePath(paths=['notes.txt'], from_='destination')]),
            Append(paths=['notes.txt'], with_='more'),
        )))
        self.assertEqual(load_dir(self.dest), {'notes.txt': 'oldmore\n', 'other.txt': 'untouched'})
        self.assertEqual(result.included_from_dest, {'notes.txt': self.dest})

    def test_reserved_directory_is_rejected(self) -> None:
        write_dir(self.template, {'.stencil/manifest.yaml': 'x', 'a.txt': 'a'})
        with self.assertRaises(StencilError) as cm:
            render(self.params(steps(Include(paths=[IncludePath(paths=['.'])]))))
        self.assertIn('is reserved', str(cm.exception))
        self.assertEqual(load_dir(self.dest), {})


class CleanupTests(RenderTestCase):
    def test_cleanup_failure_is_reported(self) -> None:
        fs = ErrorFS(remove_all_err=PermissionError(errno.EACCES, 'Permission denied'))
        with self.assertRaises(StencilError) as cm:
            render(self.params(steps(Print(message='hi')), fs=fs))
        self.assertIn('failed removing temporary directories', str(cm.exception))
        self.assertIsInstance(cm.exception.__cause__, PermissionError)

    def test_step_failure_wins_over_cleanup_failure(self) -> None:
        fs = ErrorFS(remove_all_err=PermissionError(errno.EACCES, 'Permission denied'))
        with self.assertLogs('stencil.render', level='WARNING') as logs:
            with self.assertRaises(ActionError):
                render(self.params(steps(Append(paths=['missing.txt'], with_='x')), fs=fs))
        self.assertTrue(any('failed removing temporary directory' in r.getMessage() for r in logs.records))


class _RecordingLoggerFactory:
    def __init__(self) -> None:
        self.names = []

    def get_logger(self, name: str) -> logging.Logger:
        self.names.append(name)
        return logging.getLogger('stencil.tests.recording')


class LoggerFactoryTests(RenderTestCase):
    def test_render_logs_through_the_factory(self) -> None:
        factory = _RecordingLoggerFactory()
        fs = ErrorFS(remove_all_err=PermissionError(errno.EACCES, 'Permission denied'))
        with self.assertLogs('stencil.tests.recording', level='WARNING') as logs:
            with self.assertRaises(ActionError):
                render(self.params(steps(Append(paths=['missing.txt'], with_='x')), fs=fs, logger_factory=factory))
        self.assertEqual(factory.names, ['render'])
        self.assertTrue(any('failed removing temporary directory' in r.getMessage() for r in logs.records))

    def test_explicit_logger_wins_over_factory(self) -> None:
        factory = _RecordingLoggerFactory()
        render(self.params(
            steps(Print(message='hi')),
            logger=logging.getLogger('stencil.tests.explicit'),
            logger_factory=factory,
        ))
        self.assertEqual(factory.names, [])


if __name__ == '__main__':
    unittest.main()
