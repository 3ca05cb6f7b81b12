"""
cellmap transpiler — notebook cells to async functions, with provenance.

  cell text ─▶ SourceFile ─▶ wrap ─▶ import pass ─▶ scope pass ─▶ record
                                                                   │
  host stack trace ◀──────────── format_error_stack ◀──────────────┘

| Layer                   | Purpose                                        |
<------------------------ + ---------------------------------------------- >
| **Mapped strings**      | Per-character file/line/column provenance      |
| **Edit buffer**         | Offset-stable edits over a mapped string       |
| **Import pass**         | `import` → awaited import-capability call      |
| **Scope pass**          | Top-level bindings → shared namespace object   |
| **History**             | Id-keyed records of every transpiled cell      |
| **Stack formatting**    | Runtime locations → cell locations             |
| **Source maps**         | Revision 3 export of the provenance            |
"""

from . import mapped as _mapped
from . import edit as _edit
from . import parse as _parse
from . import walk as _walk
from . import rewrite as _rewrite
from . import pipeline as _pipeline
from . import stack as _stack
from . import sourcemap as _sourcemap
from .cli import main, parse_args, run, run_repl

from .mapped import *
from .edit import *
from .parse import *
from .walk import *
from .rewrite import *
from .pipeline import *
from .stack import *
from .sourcemap import *

__all__ = []
for module in (_mapped, _edit, _parse, _walk, _rewrite, _pipeline, _stack, _sourcemap):
    __all__.extend(getattr(module, '__all__', []))
__all__ += ['main', 'parse_args', 'run', 'run_repl']
__all__ = list(dict.fromkeys(__all__))
