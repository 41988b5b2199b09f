"""Test helpers: materialise and load directory trees described as dicts."""
from __future__ import annotations

import io
import os
from typing import Dict, Mapping, Optional, Union

from stencil.core.models import Features
from stencil.rendering.context import StepParams
from stencil.rendering.funcs import template_funcs
from stencil.rendering.scope import Scope
from stencil.io.fs import RealFS


def write_dir(root: str, files: Mapping[str, Union[str, bytes]]) -> None:
    """Create every ``rel_path -> contents`` entry of *files* below *root*."""
    for rel, content in files.items():
        path = os.path.join(root, *rel.split('/'))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        data = content.encode('utf-8') if isinstance(content, str) else content
        with open(path, 'wb') as fh:
            fh.write(data)


def load_dir(root: str) -> Dict[str, str]:
    """Return ``rel_path -> contents`` (forward slashes) for every file below *root*."""
    out: Dict[str, str] = {}
    if not os.path.isdir(root):
        return out
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel = os.path.relpath(path, root).replace(os.sep, '/')
            with open(path, 'rb') as fh:
                out[rel] = fh.read().decode('utf-8')
    return out


def make_step_params(
    base: str,
    *,
    scratch: Optional[Mapping[str, str]] = None,
    template: Optional[Mapping[str, str]] = None,
    dest: Optional[Mapping[str, str]] = None,
    inputs: Optional[Mapping[str, str]] = None,
    features: Optional[Features] = None,
    **kwargs,
) -> StepParams:
    """Lay out scratch/, template/ and dest/ under *base* and return StepParams for them."""
    dirs = {}
    for name, files in (('scratch', scratch), ('template', template), ('dest', dest)):
        path = os.path.join(base, name)
        os.makedirs(path, exist_ok=True)
        write_dir(path, files or {})
        dirs[name] = path

    features = features or Features()
    kwargs.setdefault('stdout', io.StringIO())
    return StepParams(
        scope=Scope(inputs or {}, template_funcs(features)),
        scratch_dir=dirs['scratch'],
        template_dir=dirs['template'],
        dest_dir=dirs['dest'],
        fs=kwargs.pop('fs', None) or RealFS(),
        features=features,
        **kwargs,
    )
