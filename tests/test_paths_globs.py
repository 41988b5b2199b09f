from __future__ import annotations

import os
import tempfile
import unittest

from dirmap import write_dir

from stencil.core.models import ConfigPos, PosString
from stencil.errors import BackslashInGlobError, NoGlobMatchError, PathTraversalError
from stencil.utils.globs import expand_globs, has_magic, match_pattern
from stencil.utils.paths import is_reserved_in_dest, join_under, reject_backslash, safe_rel_path


class SafeRelPathTests(unittest.TestCase):
    def test_plain_relative_path_is_unchanged(self) -> None:
        self.assertEqual(safe_rel_path('a/b.txt'), 'a/b.txt')

    def test_leading_slash_means_root_relative(self) -> None:
        self.assertEqual(safe_rel_path('/a/b.txt'), 'a/b.txt')

    def test_every_leading_slash_is_removed(self) -> None:
        self.assertEqual(safe_rel_path('//tmp/x'), 'tmp/x')
        self.assertEqual(safe_rel_path('///'), '')
        self.assertFalse(os.path.isabs(safe_rel_path('///etc/passwd')))

    def test_trailing_slash_is_kept(self) -> None:
        self.assertEqual(safe_rel_path('a/'), 'a/')

    def test_dot_dot_segment_is_rejected_anywhere(self) -> None:
        for p in ('../a', 'a/../b', 'a/..'):
            with self.subTest(path=p):
                with self.assertRaises(PathTraversalError):
                    safe_rel_path(p)

    def test_names_containing_dots_are_allowed(self) -> None:
        self.assertEqual(safe_rel_path('..foo/bar..'), '..foo/bar..')

    def test_error_carries_position(self) -> None:
        with self.assertRaises(PathTraversalError) as cm:
            safe_rel_path('../x', ConfigPos(line=4, column=9))
        self.assertEqual(str(cm.exception), 'at line 4 column 9: path "../x" must not contain ".."')

    def test_backslash_is_rejected(self) -> None:
        with self.assertRaises(BackslashInGlobError) as cm:
            reject_backslash('a\\b')
        self.assertIn('backslashes in glob paths are not permitted', str(cm.exception))
        self.assertEqual(reject_backslash('a/b'), 'a/b')

    def test_reserved_destination_dir(self) -> None:
        self.assertTrue(is_reserved_in_dest('.stencil'))
        self.assertTrue(is_reserved_in_dest('.stencil/manifest.yaml'))
        self.assertFalse(is_reserved_in_dest('sub/.stencil'))
        self.assertFalse(is_reserved_in_dest('.stencilrc'))


class JoinUnderTests(unittest.TestCase):
    def test_relative_path_is_joined(self) -> None:
        root = os.path.join(os.sep, 'work', 'scratch')
        self.assertEqual(join_under(root, 'a/b.txt'), os.path.join(root, 'a', 'b.txt'))
        self.assertEqual(join_under(root, '.'), root)

    def test_absolute_path_is_refused(self) -> None:
        root = os.path.join(os.sep, 'work', 'scratch')
        with self.assertRaises(PathTraversalError) as cm:
            join_under(root, os.path.join(os.sep, 'tmp', 'x'), ConfigPos(3, 1))
        self.assertIn('escapes its root directory', str(cm.exception))
        self.assertTrue(str(cm.exception).startswith('at line 3 column 1: '))

    def test_sibling_with_common_prefix_is_refused(self) -> None:
        root = os.path.join(os.sep, 'work', 'scratch')
        with self.assertRaises(PathTraversalError):
            join_under(root, os.path.join('..', 'scratch2', 'x'))


class MatchPatternTests(unittest.TestCase):
    def test_star_does_not_cross_separator(self) -> None:
        self.assertTrue(match_pattern('*.txt', 'a.txt'))
        self.assertFalse(match_pattern('*.txt', 'd/a.txt'))
        self.assertTrue(match_pattern('d/*.txt', 'd/a.txt'))

    def test_star_matches_dotfiles(self) -> None:
        self.assertTrue(match_pattern('*', '.hidden'))

    def test_negated_classes(self) -> None:
        self.assertTrue(match_pattern('[^a]*', 'b.txt'))
        self.assertTrue(match_pattern('[!a]*', 'b.txt'))
        self.assertFalse(match_pattern('[^a]*', 'a.txt'))

    def test_has_magic(self) -> None:
        self.assertTrue(has_magic('*.md'))
        self.assertTrue(has_magic('f[ab]'))
        self.assertFalse(has_magic('plain.md'))


class ExpandGlobsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = self._td.name
        write_dir(self.root, {'a.txt': 'a', 'b.txt': 'b', 'c.md': 'c', 'sub/d.txt': 'd'})

    def tearDown(self) -> None:
        self._td.cleanup()

    def _rel(self, results) -> list:
        return [os.path.relpath(r.value, self.root).replace(os.sep, '/') for r in results]

    def test_star_is_sorted(self) -> None:
        out = expand_globs([PosString('*.txt')], self.root)
        self.assertEqual(self._rel(out), ['a.txt', 'b.txt'])

    def test_duplicates_are_dropped_keeping_first_order(self) -> None:
        out = expand_globs([PosString('b.txt'), PosString('*.txt')], self.root)
        self.assertEqual(self._rel(out), ['b.txt', 'a.txt'])

    def test_glob_in_directory_segment(self) -> None:
        out = expand_globs([PosString('s*/*.txt')], self.root)
        self.assertEqual(self._rel(out), ['sub/d.txt'])

    def test_no_match_is_an_error_with_position(self) -> None:
        with self.assertRaises(NoGlobMatchError) as cm:
            expand_globs([PosString('*.nope', ConfigPos(3, 4))], self.root)
        self.assertEqual(str(cm.exception), 'at line 3 column 4: glob "*.nope" did not match any files')

    def test_literal_missing_path_is_an_error(self) -> None:
        with self.assertRaises(NoGlobMatchError):
            expand_globs([PosString('missing.txt')], self.root)

    def test_skip_globs_joins_without_looking(self) -> None:
        out = expand_globs([PosString('*.txt')], self.root, skip_globs=True)
        self.assertEqual(self._rel(out), ['*.txt'])

    def test_position_is_kept_on_results(self) -> None:
        pos = ConfigPos(7, 1)
        out = expand_globs([PosString('c.md', pos)], self.root)
        self.assertEqual(out[0].pos, pos)


if __name__ == '__main__':
    unittest.main()
