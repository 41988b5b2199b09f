"""
template_engine – Go text/template compatible engine used for every templated value.

Template authors write Go templates (``{{.name}}``, ``{{if ...}}``,
``{{range ...}}``, ``{{.x | toUpper}}``), so the default engine implements
the subset of ``text/template`` they use, without shelling out to Go:

  • text and ``{{ }}`` actions, ``{{-``/``-}}`` trim markers, ``{{/* */}}`` comments
  • pipelines, function calls, parenthesised sub-pipelines
  • operands: ``.``, ``.name``, ``$``, ``$var``, string / raw string / number / bool literals
  • ``if``/``else if``/``else``, ``range`` (``$v :=``, ``$i, $v :=``), ``with``
  • built-ins ``and or not eq ne lt le gt ge len index print printf println``

A map key that does not exist is an error (``missingkey=error``) reported as
:class:`UnknownVariableError`; every other failure is a
:class:`TemplateSyntaxError`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from stencil.core.interfaces.templating import TemplateEngineProtocol
from stencil.core.models import StrLike, pos_of, value_of
from stencil.errors import StencilError, TemplateSyntaxError, UnknownVariableError
from stencil.logging.helpers import get_logger
from stencil.rendering.scope import Scope

_LEFT = '{{'
_RIGHT = '}}'
_SPACE = ' \t\r\n'
_IDENT_RX = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
_NUM_RX = re.compile(
    r'[+-]?(?:0[xX][0-9a-fA-F]+|\d+\.\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|\d+(?:[eE][+-]?\d+)?)'
)
_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"', "'": "'",
    'a': '\a', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
}
_KEYWORDS = {'if', 'else', 'end', 'range', 'with', 'define', 'template', 'block', 'break', 'continue'}
_MISSING = object()


class _TemplateError(Exception):
    """Internal failure; converted to TemplateSyntaxError by the engine."""


# --------------------------------------------------------------------------- #
#  Lexing                                                                     #
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class _Tok:
    kind: str
    value: Any = None


def _lex(src: str) -> List[tuple]:
    """Split *src* into ``('text', str)`` and ``('action', tokens, line)`` items."""
    items: List[tuple] = []
    i = 0
    n = len(src)
    trim_next = False
    line = 1
    counted = 0
    while i < n:
        j = src.find(_LEFT, i)
        if j < 0:
            text = src[i:]
            if trim_next:
                text = text.lstrip(_SPACE)
            if text:
                items.append(('text', text))
            break

        text = src[i:j]
        k = j + len(_LEFT)
        left_trim = src.startswith('-', k) and k + 1 < n and src[k + 1] in _SPACE
        if trim_next:
            text = text.lstrip(_SPACE)
        if left_trim:
            text = text.rstrip(_SPACE)
            k += 2
        if text:
            items.append(('text', text))

        line += src.count('\n', counted, j)
        counted = j
        toks, i, trim_next, is_comment = _lex_action(src, k, line)
        if not is_comment:
            items.append(('action', toks, line))
    return items


def _lex_action(src: str, i: int, line: int) -> Tuple[List[_Tok], int, bool, bool]:
    """Tokenize one action starting at *i*; return (tokens, end, right_trim, is_comment)."""
    n = len(src)
    if src.startswith('/*', i):
        end = src.find('*/', i + 2)
        if end < 0:
            raise _TemplateError(f'line {line}: unclosed comment')
        j = end + 2
        if src.startswith(_RIGHT, j):
            return [], j + 2, False, True
        if j < n and src[j] in _SPACE and src.startswith('-' + _RIGHT, j + 1):
            return [], j + 4, True, True
        raise _TemplateError(f'line {line}: comment ends before closing delimiter')

    toks: List[_Tok] = []
    while True:
        if i >= n:
            raise _TemplateError(f'line {line}: unclosed action')
        c = src[i]
        if c in _SPACE:
            j = i
            while j < n and src[j] in _SPACE:
                j += 1
            if src.startswith('-' + _RIGHT, j):
                return toks, j + 3, True, False
            i = j
            continue
        if src.startswith(_RIGHT, i):
            return toks, i + 2, False, False
        if c == '|':
            toks.append(_Tok('pipe'))
            i += 1
        elif c == '(':
            toks.append(_Tok('lparen'))
            i += 1
        elif c == ')':
            toks.append(_Tok('rparen'))
            i += 1
        elif c == ',':
            toks.append(_Tok('comma'))
            i += 1
        elif src.startswith(':=', i):
            toks.append(_Tok('declare'))
            i += 2
        elif c == '=':
            toks.append(_Tok('assign'))
            i += 1
        elif c == '"':
            s, i = _lex_quoted(src, i, line)
            toks.append(_Tok('const', s))
        elif c == '`':
            end = src.find('`', i + 1)
            if end < 0:
                raise _TemplateError(f'line {line}: unterminated raw quoted string')
            toks.append(_Tok('const', src[i + 1:end]))
            i = end + 1
        elif c == "'":
            end = src.find("'", i + 1)
            body = src[i + 1:end] if end > 0 else ''
            if len(body) == 1:
                toks.append(_Tok('const', ord(body)))
            elif len(body) == 2 and body[0] == '\\' and body[1] in _ESCAPES:
                toks.append(_Tok('const', ord(_ESCAPES[body[1]])))
            else:
                raise _TemplateError(f'line {line}: malformed character constant')
            i = end + 1
        elif c == '.' and i + 1 < n and (src[i + 1].isalpha() or src[i + 1] == '_'):
            names, i = _lex_fields(src, i)
            toks.append(_Tok('field', names))
        elif c == '$':
            m = _IDENT_RX.match(src, i + 1)
            name = '$' + (m.group(0) if m else '')
            i = m.end() if m else i + 1
            names = ()
            if src.startswith('.', i) and i + 1 < n and (src[i + 1].isalpha() or src[i + 1] == '_'):
                names, i = _lex_fields(src, i)
            toks.append(_Tok('var', (name, names)))
        elif c.isdigit() or (c in '+-.' and i + 1 < n and src[i + 1].isdigit()):
            m = _NUM_RX.match(src, i)
            if not m:
                raise _TemplateError(f'line {line}: bad number syntax')
            toks.append(_Tok('const', _parse_number(m.group(0))))
            i = m.end()
        elif c == '.':
            toks.append(_Tok('dot'))
            i += 1
        else:
            m = _IDENT_RX.match(src, i)
            if not m:
                raise _TemplateError(f'line {line}: unexpected "{c}" in command')
            word = m.group(0)
            if word in ('true', 'false'):
                toks.append(_Tok('const', word == 'true'))
            elif word == 'nil':
                toks.append(_Tok('nil'))
            else:
                toks.append(_Tok('ident', word))
            i = m.end()


def _lex_fields(src: str, i: int) -> Tuple[Tuple[str, ...], int]:
    names: List[str] = []
    while src.startswith('.', i):
        m = _IDENT_RX.match(src, i + 1)
        if not m:
            break
        names.append(m.group(0))
        i = m.end()
    return tuple(names), i


def _lex_quoted(src: str, i: int, line: int) -> Tuple[str, int]:
    out: List[str] = []
    j = i + 1
    n = len(src)
    while True:
        if j >= n or src[j] == '\n':
            raise _TemplateError(f'line {line}: unterminated quoted string')
        ch = src[j]
        if ch == '"':
            return ''.join(out), j + 1
        if ch != '\\':
            out.append(ch)
            j += 1
            continue
        esc = src[j + 1] if j + 1 < n else ''
        if esc in _ESCAPES:
            out.append(_ESCAPES[esc])
            j += 2
            continue
        width = {'x': 2, 'u': 4, 'U': 8}.get(esc)
        digits = src[j + 2:j + 2 + width] if width else ''
        if not width or len(digits) != width or not all(d in '0123456789abcdefABCDEF' for d in digits):
            raise _TemplateError(f'line {line}: unknown escape sequence')
        out.append(chr(int(digits, 16)))
        j += 2 + width


def _parse_number(text: str) -> Any:
    body = text.lstrip('+-')
    sign = -1 if text.startswith('-') else 1
    if body[:2] in ('0x', '0X'):
        return sign * int(body, 16)
    if '.' in body or 'e' in body or 'E' in body:
        return sign * float(body)
    return sign * int(body)


# --------------------------------------------------------------------------- #
#  Parse tree                                                                 #
# --------------------------------------------------------------------------- #
@dataclass
class _Pipe:
    decl: List[str]
    is_assign: bool
    cmds: List[List[tuple]]
    line: int


@dataclass
class _Text:
    text: str


@dataclass
class _Action:
    pipe: _Pipe


@dataclass
class _Block:
    kind: str
    pipe: _Pipe
    body: list
    else_body: Optional[list] = None


@dataclass
class CompiledTemplate:
    """A parsed template; reusable against many data maps."""
    source: str
    nodes: list = field(default_factory=list)


class _Parser:
    def __init__(self, items: List[tuple], funcs: Mapping[str, Callable[..., Any]]) -> None:
        self._items = items
        self._i = 0
        self._funcs = funcs

    def parse(self) -> list:
        nodes, stop = self._parse_list()
        if stop is not None:
            raise _TemplateError(f'line {stop[2]}: unexpected {{{{{stop[0]}}}}}')
        return nodes

    def _parse_list(self) -> Tuple[list, Optional[tuple]]:
        nodes: list = []
        while self._i < len(self._items):
            item = self._items[self._i]
            self._i += 1
            if item[0] == 'text':
                nodes.append(_Text(item[1]))
                continue
            toks, line = item[1], item[2]
            if not toks:
                raise _TemplateError(f'line {line}: missing value for command')
            head = toks[0]
            if head.kind == 'ident' and head.value in ('end', 'else'):
                return nodes, (head.value, toks[1:], line)
            if head.kind == 'ident' and head.value in ('if', 'with', 'range'):
                nodes.append(self._parse_block(head.value, toks[1:], line))
                continue
            if head.kind == 'ident' and head.value in _KEYWORDS:
                raise _TemplateError(f'line {line}: {{{{{head.value}}}}} is not supported')
            nodes.append(_Action(self._parse_pipe(toks, line)))
        return nodes, None

    def _parse_block(self, kind: str, toks: List[_Tok], line: int) -> _Block:
        pipe = self._parse_pipe(toks, line, max_decl=2 if kind == 'range' else 1)
        body, stop = self._parse_list()
        if stop is None:
            raise _TemplateError(f'line {line}: unexpected EOF in {kind}')

        node = _Block(kind, pipe, body)
        if stop[0] == 'else':
            rest = stop[1]
            if rest and rest[0].kind == 'ident' and rest[0].value == kind and kind != 'range':
                # "else if" / "else with" shares the closing {{end}}.
                node.else_body = [self._parse_block(kind, rest[1:], stop[2])]
                return node
            if rest:
                raise _TemplateError(f'line {stop[2]}: unexpected token after else')
            node.else_body, stop = self._parse_list()
            if stop is None:
                raise _TemplateError(f'line {line}: unexpected EOF in {kind}')
        if stop[0] != 'end' or stop[1]:
            raise _TemplateError(f'line {stop[2]}: expected end; found {stop[0]}')
        return node

    def _parse_pipe(self, toks: List[_Tok], line: int, *, max_decl: int = 1) -> _Pipe:
        decl: List[str] = []
        is_assign = False
        idx = 0
        if len(toks) > 1 and toks[0].kind == 'var' and toks[1].kind in ('declare', 'assign'):
            decl = [toks[0].value[0]]
            is_assign = toks[1].kind == 'assign'
            idx = 2
        elif (
            len(toks) > 3 and toks[0].kind == 'var' and toks[1].kind == 'comma'
            and toks[2].kind == 'var' and toks[3].kind == 'declare'
        ):
            if max_decl < 2:
                raise _TemplateError(f'line {line}: too many declarations in command')
            decl = [toks[0].value[0], toks[2].value[0]]
            idx = 4

        cmds: List[List[tuple]] = []
        cur: List[tuple] = []
        j = idx
        while j < len(toks):
            if toks[j].kind == 'pipe':
                if not cur:
                    raise _TemplateError(f'line {line}: missing command before "|"')
                cmds.append(cur)
                cur = []
                j += 1
                continue
            arg, j = self._parse_arg(toks, j, line)
            cur.append(arg)
        if not cur:
            raise _TemplateError(f'line {line}: missing value for command')
        cmds.append(cur)
        return _Pipe(decl, is_assign, cmds, line)

    def _parse_arg(self, toks: List[_Tok], j: int, line: int) -> Tuple[tuple, int]:
        t = toks[j]
        if t.kind == 'lparen':
            depth = 1
            k = j + 1
            while k < len(toks) and depth:
                if toks[k].kind == 'lparen':
                    depth += 1
                elif toks[k].kind == 'rparen':
                    depth -= 1
                k += 1
            if depth:
                raise _TemplateError(f'line {line}: unclosed left paren')
            return ('pipe', self._parse_pipe(toks[j + 1:k - 1], line)), k
        if t.kind == 'field':
            return ('field', t.value), j + 1
        if t.kind == 'dot':
            return ('dot',), j + 1
        if t.kind == 'var':
            return ('var', t.value[0], t.value[1]), j + 1
        if t.kind == 'const':
            return ('const', t.value), j + 1
        if t.kind == 'nil':
            return ('nil',), j + 1
        if t.kind == 'ident':
            if t.value in _KEYWORDS:
                raise _TemplateError(f'line {line}: unexpected {t.value} in command')
            if t.value not in _BUILTINS and t.value not in self._funcs:
                raise _TemplateError(f'line {line}: function "{t.value}" not defined')
            return ('func', t.value), j + 1
        raise _TemplateError(f'line {line}: unexpected {t.kind} in command')


# --------------------------------------------------------------------------- #
#  Values and built-ins                                                       #
# --------------------------------------------------------------------------- #
def _truth(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    if isinstance(v, (str, bytes, list, tuple, Mapping)):
        return len(v) > 0
    return True


def _to_text(v: Any) -> str:
    if v is None:
        return '<no value>'
    if isinstance(v, bool):
        return 'true' if v else 'false'
    if isinstance(v, float):
        if v.is_integer() and abs(v) < 1e21:
            return str(int(v))
        return repr(v)
    if isinstance(v, (list, tuple)):
        return '[' + ' '.join(_to_text(x) for x in v) + ']'
    if isinstance(v, Mapping):
        return 'map[' + ' '.join(f'{k}:{_to_text(v[k])}' for k in sorted(v)) + ']'
    return str(v)


def _type_name(v: Any) -> str:
    if v is None:
        return 'nil'
    if isinstance(v, bool):
        return 'bool'
    if isinstance(v, int):
        return 'int'
    if isinstance(v, float):
        return 'float64'
    if isinstance(v, str):
        return 'string'
    if isinstance(v, (list, tuple)):
        return 'slice'
    if isinstance(v, Mapping):
        return 'map'
    return type(v).__name__


def _kind(v: Any) -> str:
    t = _type_name(v)
    return 'number' if t in ('int', 'float64') else t


def _eq(a: Any, *others: Any) -> bool:
    if not others:
        raise TypeError('missing argument for comparison')
    for b in others:
        if _kind(a) != _kind(b) and a is not None and b is not None:
            raise TypeError('incompatible types for comparison')
        if a == b:
            return True
    return False


def _ne(a: Any, b: Any) -> bool:
    return not _eq(a, b)


def _ordered(a: Any, b: Any) -> None:
    if _kind(a) != _kind(b) or _kind(a) not in ('number', 'string'):
        raise TypeError('incompatible types for comparison')


def _lt(a: Any, b: Any) -> bool:
    _ordered(a, b)
    return a < b


def _le(a: Any, b: Any) -> bool:
    _ordered(a, b)
    return a <= b


def _gt(a: Any, b: Any) -> bool:
    _ordered(a, b)
    return a > b


def _ge(a: Any, b: Any) -> bool:
    _ordered(a, b)
    return a >= b


def _len(v: Any) -> int:
    if isinstance(v, str):
        return len(v.encode('utf-8', 'surrogateescape'))
    if isinstance(v, (bytes, list, tuple, Mapping)):
        return len(v)
    raise TypeError(f"len of type {_type_name(v)}")


def _index(item: Any, *indices: Any) -> Any:
    for idx in indices:
        if isinstance(item, Mapping):
            item = item.get(idx, '')
            continue
        if isinstance(item, (str, list, tuple)):
            seq = item.encode('utf-8', 'surrogateescape') if isinstance(item, str) else item
            if isinstance(idx, bool) or not isinstance(idx, int):
                raise TypeError(f'cannot index slice/array with type {_type_name(idx)}')
            if idx < 0 or idx >= len(seq):
                raise IndexError(f'index out of range: {idx}')
            item = seq[idx]
            continue
        raise TypeError(f"can't index item of type {_type_name(item)}")
    return item


def _not(v: Any) -> bool:
    return not _truth(v)


def _print(*args: Any) -> str:
    out: List[str] = []
    for i, a in enumerate(args):
        if i > 0 and not isinstance(a, str) and not isinstance(args[i - 1], str):
            out.append(' ')
        out.append(_to_text(a))
    return ''.join(out)


def _println(*args: Any) -> str:
    return ' '.join(_to_text(a) for a in args) + '\n'


_VERB_RX = re.compile(r'%([-+# 0]*)(\d+)?(?:\.(\d+))?([a-zA-Z%])')


def _printf(fmt: str, *args: Any) -> str:
    """Go ``fmt.Sprintf`` for the verbs templates commonly use."""
    remaining = list(args)
    out: List[str] = []
    pos = 0
    for m in _VERB_RX.finditer(fmt):
        out.append(fmt[pos:m.start()])
        pos = m.end()
        flags, width, prec, verb = m.group(1), m.group(2), m.group(3), m.group(4)
        if verb == '%':
            out.append('%')
            continue
        if not remaining:
            out.append(f'%!{verb}(MISSING)')
            continue
        arg = remaining.pop(0)
        if verb in 'vst':
            s = _to_text(arg)
            if prec is not None and verb == 's':
                s = s[:int(prec)]
        elif verb == 'q':
            s = '"' + str(arg).replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n') + '"'
        elif verb == 'd' and isinstance(arg, int) and not isinstance(arg, bool):
            s = str(arg)
            if '+' in flags and arg >= 0:
                s = '+' + s
        elif verb in 'xX' and isinstance(arg, (int, str)) and not isinstance(arg, bool):
            s = format(arg, 'x') if isinstance(arg, int) else arg.encode('utf-8').hex()
            s = s.upper() if verb == 'X' else s
        elif verb in 'feEgG' and isinstance(arg, (int, float)) and not isinstance(arg, bool):
            spec = f'.{prec}{verb}' if prec is not None else ('.6' + verb if verb in 'feE' else verb)
            s = format(float(arg), spec)
        elif verb == 'c' and isinstance(arg, int):
            s = chr(arg)
        else:
            s = f'%!{verb}({_type_name(arg)}={_to_text(arg)})'
        if width:
            w = int(width)
            if '-' in flags:
                s = s.ljust(w)
            elif '0' in flags and verb in 'dxXfeEgG':
                sign = s[0] if s[:1] in '+-' else ''
                s = sign + s[len(sign):].rjust(w - len(sign), '0')
            else:
                s = s.rjust(w)
        out.append(s)
    out.append(fmt[pos:])
    if remaining:
        extra = ', '.join(f'{_type_name(a)}={_to_text(a)}' for a in remaining)
        out.append(f'%!(EXTRA {extra})')
    return ''.join(out)


_BUILTINS: Dict[str, Callable[..., Any]] = {
    'and': lambda *a: a,
    'or': lambda *a: a,
    'not': _not,
    'eq': _eq,
    'ne': _ne,
    'lt': _lt,
    'le': _le,
    'gt': _gt,
    'ge': _ge,
    'len': _len,
    'index': _index,
    'print': _print,
    'printf': _printf,
    'println': _println,
}


# --------------------------------------------------------------------------- #
#  Execution                                                                  #
# --------------------------------------------------------------------------- #
class _Exec:
    def __init__(self, funcs: Mapping[str, Callable[..., Any]], data: Any) -> None:
        self._funcs = funcs
        self._vars: List[Tuple[str, Any]] = [('$', data)]

    def run(self, nodes: list, dot: Any) -> str:
        out: List[str] = []
        self._walk(nodes, dot, out)
        return ''.join(out)

    def _walk(self, nodes: list, dot: Any, out: List[str]) -> None:
        mark = len(self._vars)
        try:
            for node in nodes:
                if isinstance(node, _Text):
                    out.append(node.text)
                elif isinstance(node, _Action):
                    val = self._pipe(node.pipe, dot)
                    if not node.pipe.decl:
                        out.append(_to_text(val))
                else:
                    self._block(node, dot, out)
        finally:
            del self._vars[mark:]

    def _block(self, node: _Block, dot: Any, out: List[str]) -> None:
        mark = len(self._vars)
        try:
            if node.kind in ('if', 'with'):
                val = self._pipe(node.pipe, dot)
                if _truth(val):
                    self._walk(node.body, val if node.kind == 'with' else dot, out)
                elif node.else_body is not None:
                    self._walk(node.else_body, dot, out)
                return

            val = self._pipe(node.pipe, dot, bind=False)
            items = self._range_items(val, node.pipe.line)
            if not items:
                if node.else_body is not None:
                    self._walk(node.else_body, dot, out)
                return
            decl = node.pipe.decl
            for key, elem in items:
                inner = len(self._vars)
                if len(decl) == 1:
                    self._vars.append((decl[0], elem))
                elif len(decl) == 2:
                    self._vars.append((decl[0], key))
                    self._vars.append((decl[1], elem))
                self._walk(node.body, elem, out)
                del self._vars[inner:]
        finally:
            del self._vars[mark:]

    @staticmethod
    def _range_items(val: Any, line: int) -> List[Tuple[Any, Any]]:
        if val is None:
            return []
        if isinstance(val, (list, tuple)):
            return list(enumerate(val))
        if isinstance(val, Mapping):
            return [(k, val[k]) for k in sorted(val)]
        if isinstance(val, int) and not isinstance(val, bool):
            return [(i, i) for i in range(val)]
        raise _TemplateError(f"line {line}: range can't iterate over {_to_text(val)}")

    def _pipe(self, pipe: _Pipe, dot: Any, *, bind: bool = True) -> Any:
        val: Any = _MISSING
        for cmd in pipe.cmds:
            val = self._cmd(cmd, dot, val, pipe.line)
        if bind and pipe.decl:
            if pipe.is_assign:
                self._set_var(pipe.decl[0], val, pipe.line)
            else:
                self._vars.append((pipe.decl[0], val))
        return val

    def _cmd(self, cmd: List[tuple], dot: Any, final: Any, line: int) -> Any:
        first = cmd[0]
        if first[0] == 'func':
            return self._call(first[1], cmd[1:], dot, final, line)
        if len(cmd) > 1 or final is not _MISSING:
            raise _TemplateError(f"line {line}: can't give argument to non-function")
        return self._arg(first, dot, line)

    def _call(self, name: str, args: List[tuple], dot: Any, final: Any, line: int) -> Any:
        if name in ('and', 'or'):
            if not args and final is _MISSING:
                raise _TemplateError(f'line {line}: wrong number of args for {name}: want at least 1 got 0')
            result: Any = None
            for a in args:
                result = self._arg(a, dot, line)
                if (name == 'and') != _truth(result):
                    return result
            if final is not _MISSING:
                result = final
            return result

        values = [self._arg(a, dot, line) for a in args]
        if final is not _MISSING:
            values.append(final)
        fn = _BUILTINS.get(name) or self._funcs[name]
        try:
            return fn(*values)
        except StencilError:
            raise
        except (TypeError, ValueError, AttributeError, IndexError, KeyError) as exc:
            raise _TemplateError(f'line {line}: error calling {name}: {exc}') from exc

    def _arg(self, a: tuple, dot: Any, line: int) -> Any:
        kind = a[0]
        if kind == 'field':
            return self._fields(dot, a[1], line)
        if kind == 'dot':
            return dot
        if kind == 'var':
            return self._fields(self._get_var(a[1], line), a[2], line)
        if kind == 'const':
            return a[1]
        if kind == 'nil':
            return None
        if kind == 'func':
            return self._call(a[1], [], dot, _MISSING, line)
        return self._pipe(a[1], dot)

    @staticmethod
    def _fields(value: Any, names: Iterable[str], line: int) -> Any:
        for name in names:
            if isinstance(value, Mapping):
                if name not in value:
                    raise UnknownVariableError(name, value.keys())
                value = value[name]
            elif value is None:
                raise _TemplateError(f'line {line}: nil pointer evaluating .{name}')
            else:
                raise _TemplateError(f"line {line}: can't evaluate field {name} in type {_type_name(value)}")
        return value

    def _get_var(self, name: str, line: int) -> Any:
        for n, v in reversed(self._vars):
            if n == name:
                return v
        raise _TemplateError(f'line {line}: undefined variable: {name}')

    def _set_var(self, name: str, value: Any, line: int) -> None:
        for i in range(len(self._vars) - 1, -1, -1):
            if self._vars[i][0] == name:
                self._vars[i] = (name, value)
                return
        raise _TemplateError(f'line {line}: undefined variable: {name}')


# --------------------------------------------------------------------------- #
#  Engine                                                                     #
# --------------------------------------------------------------------------- #
class GoTemplateEngine(TemplateEngineProtocol):
    """Default :class:`TemplateEngineProtocol` implementation."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('templates')

    def compile(self, template: str, funcs: Mapping[str, Callable[..., Any]]) -> CompiledTemplate:
        try:
            nodes = _Parser(_lex(template), funcs).parse()
        except _TemplateError as exc:
            raise TemplateSyntaxError(f'error compiling as go-template: {exc}') from exc
        return CompiledTemplate(source=template, nodes=nodes)

    def execute(
        self,
        compiled: CompiledTemplate,
        data: Mapping[str, Any],
        funcs: Mapping[str, Callable[..., Any]],
    ) -> str:
        try:
            return _Exec(funcs, data).run(compiled.nodes, data)
        except _TemplateError as exc:
            raise TemplateSyntaxError(f'template execution failed: {exc}') from exc

    def render(self, template: str, scope: Scope) -> str:  # type: ignore[override]
        """Render *template* against every variable visible in *scope*."""
        funcs = scope.funcs()
        compiled = self.compile(template, funcs)
        return self.execute(compiled, scope.all_vars(), funcs)


def parse_exec(
    text: StrLike,
    scope: Scope,
    *,
    engine: Optional[TemplateEngineProtocol] = None,
) -> str:
    """Render one spec value, attaching its spec position to any error."""
    eng = engine or _DEFAULT_ENGINE
    try:
        return eng.render(value_of(text), scope)
    except StencilError as exc:
        exc.locate(pos_of(text))
        raise


def parse_exec_all(
    texts: Iterable[StrLike],
    scope: Scope,
    *,
    engine: Optional[TemplateEngineProtocol] = None,
) -> List[str]:
    return [parse_exec(t, scope, engine=engine) for t in texts]


_DEFAULT_ENGINE = GoTemplateEngine()
