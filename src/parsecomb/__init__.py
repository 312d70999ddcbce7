"""
Library to build string parsers by combining small parsers into bigger ones.

See the objects for more explanations.

See the `parsecomb.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
number_list = between("[", integer().separated_by(","), "]")

value = Forward("value")
nested = between("[", value.separated_by(","), "]")
value.define(either(integer(), nested).map(lambda e: e.value))
```

Using parsers:
```
result = number_list.run("[1,2,3]")
if result:
    ... # `result` is a `Matched` object
else:
    ... # `result` is a `Failed` object
```
"""

import parsecomb.const as const
import parsecomb.main
from parsecomb.main import (
    FailureKind,
    ParseError,
    ExcessInput,
    Matched,
    Failed,
    ParseOutcome,
    Left,
    Right,
    Either,
    Parser,
    character,
    string_matching,
    letters,
    whitespace,
    digits,
    literal,
    text_up_to,
    text_through,
    integer,
    between,
    split,
    either,
    choice,
    lazily_provided,
    Forward,
    ParserProviding,
    provided,
    run,
)
import parsecomb.general as general
