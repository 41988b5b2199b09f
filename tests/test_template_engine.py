from __future__ import annotations

import unittest

from stencil.core.models import ConfigPos, Features, PosString
from stencil.errors import TemplateSyntaxError, UnknownVariableError
from stencil.rendering.funcs import (
    format_time,
    split,
    template_funcs,
    to_lower_hyphen_case,
    to_lower_snake_case,
    to_upper_snake_case,
    trim_prefix,
)
from stencil.rendering.scope import Scope
from stencil.rendering.template_engine import GoTemplateEngine, parse_exec, parse_exec_all


def _render(template: str, **variables: str) -> str:
    return GoTemplateEngine().render(template, Scope(variables, template_funcs()))


class GoTemplateEngineTests(unittest.TestCase):
    def test_plain_text_passes_through(self) -> None:
        self.assertEqual(_render('no actions here'), 'no actions here')

    def test_field_lookup(self) -> None:
        self.assertEqual(_render('hello {{.name}}!', name='world'), 'hello world!')

    def test_pipeline_with_function(self) -> None:
        self.assertEqual(_render('{{.name | toUpper}}', name='abc'), 'ABC')
        self.assertEqual(_render('{{toUpper .name}}', name='abc'), 'ABC')

    def test_parenthesised_sub_pipeline(self) -> None:
        self.assertEqual(_render('{{replace (toLower .x) "a" "b" -1}}', x='AAA'), 'bbb')

    def test_if_else(self) -> None:
        tpl = '{{if eq .env "prod"}}P{{else if eq .env "dev"}}D{{else}}?{{end}}'
        self.assertEqual(_render(tpl, env='prod'), 'P')
        self.assertEqual(_render(tpl, env='dev'), 'D')
        self.assertEqual(_render(tpl, env='qa'), '?')

    def test_range_with_index_and_value(self) -> None:
        tpl = '{{range $i, $v := split .list ","}}{{$i}}={{$v}};{{end}}'
        self.assertEqual(_render(tpl, list='a,b'), '0=a;1=b;')

    def test_range_binds_dot(self) -> None:
        self.assertEqual(_render('{{range split .list ","}}<{{.}}>{{end}}', list='x,y'), '<x><y>')

    def test_with_block(self) -> None:
        self.assertEqual(_render('{{with .name}}[{{.}}]{{end}}', name='n'), '[n]')
        self.assertEqual(_render('{{with .name}}[{{.}}]{{else}}none{{end}}', name=''), 'none')

    def test_trim_markers(self) -> None:
        self.assertEqual(_render('a  {{- .x -}}  b', x='X'), 'aXb')

    def test_comments_are_dropped(self) -> None:
        self.assertEqual(_render('a{{/* ignored */}}b'), 'ab')

    def test_variables_and_literals(self) -> None:
        self.assertEqual(_render('{{$x := "lit"}}{{$x}}-{{len "four"}}'), 'lit-4')

    def test_and_or_not(self) -> None:
        self.assertEqual(_render('{{if and .a (not .b)}}yes{{end}}', a='1', b=''), 'yes')
        self.assertEqual(_render('{{or .a .b}}', a='', b='second'), 'second')

    def test_printf(self) -> None:
        self.assertEqual(_render('{{printf "%s-%d" .x 7}}', x='v'), 'v-7')

    def test_missing_variable_is_distinguishable(self) -> None:
        with self.assertRaises(UnknownVariableError) as cm:
            _render('{{.nope}}', b='2', a='1')
        self.assertEqual(cm.exception.var_name, 'nope')
        self.assertEqual(
            str(cm.exception),
            'the template referenced a nonexistent variable name "nope"; available variable names are [a b]',
        )

    def test_unclosed_block_is_a_syntax_error(self) -> None:
        with self.assertRaises(TemplateSyntaxError) as cm:
            _render('{{if .x}}never closed', x='1')
        self.assertIn('error compiling as go-template', str(cm.exception))

    def test_unknown_function_is_a_syntax_error(self) -> None:
        with self.assertRaises(TemplateSyntaxError):
            _render('{{frobnicate .x}}', x='1')

    def test_inner_scope_shadows_outer(self) -> None:
        outer = Scope({'a': 'outer', 'b': 'kept'}, template_funcs())
        inner = outer.with_({'a': 'inner'})
        self.assertEqual(GoTemplateEngine().render('{{.a}} {{.b}}', inner), 'inner kept')


class ParseExecTests(unittest.TestCase):
    def test_position_is_attached_to_errors(self) -> None:
        scope = Scope({}, template_funcs())
        with self.assertRaises(UnknownVariableError) as cm:
            parse_exec(PosString('{{.missing}}', ConfigPos(12, 3)), scope)
        self.assertTrue(str(cm.exception).startswith('at line 12 column 3: '))

    def test_parse_exec_all(self) -> None:
        scope = Scope({'x': '1'}, template_funcs())
        self.assertEqual(parse_exec_all(['a{{.x}}', PosString('b{{.x}}')], scope), ['a1', 'b1'])


class TemplateFuncTests(unittest.TestCase):
    def test_case_conversions(self) -> None:
        self.assertEqual(to_lower_snake_case('Hello World-Foo'), 'hello_world_foo')
        self.assertEqual(to_upper_snake_case('my-var name'), 'MY_VAR_NAME')
        self.assertEqual(to_lower_hyphen_case('Hello_World foo'), 'hello-world-foo')

    def test_split_and_trim(self) -> None:
        self.assertEqual(split('a,b,,c', ','), ['a', 'b', '', 'c'])
        self.assertEqual(split('abc', ''), ['a', 'b', 'c'])
        self.assertEqual(trim_prefix('prefix-body', 'prefix-'), 'body')
        self.assertEqual(trim_prefix('body', 'prefix-'), 'body')

    def test_format_time(self) -> None:
        self.assertEqual(format_time('1700000000000', '2006-01-02'), '2023-11-14')
        self.assertEqual(format_time('1700000000123', '15:04:05.000'), '22:13:20.123')

    def test_format_time_rejects_non_integers(self) -> None:
        with self.assertRaises(ValueError) as cm:
            format_time('soon', '2006')
        self.assertIn('time is not an integer', str(cm.exception))

    def test_format_time_available_unless_skipped(self) -> None:
        self.assertIn('formatTime', template_funcs())
        self.assertNotIn('formatTime', template_funcs(Features(skip_time=True)))

    def test_sort_strings_in_template(self) -> None:
        self.assertEqual(_render('{{range sortStrings (split .x ",")}}{{.}}{{end}}', x='c,a,b'), 'abc')


if __name__ == '__main__':
    unittest.main()
